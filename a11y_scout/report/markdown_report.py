# File: a11y_scout/report/markdown_report.py
"""a11y_scout.report.markdown_report: markdown rendering of a PageReport via Jinja2.

:func:`format_report` is total: whatever the report contains, it returns a
string. Violations are rendered in the order they were supplied.
"""
from __future__ import annotations

import re

from jinja2 import Environment, StrictUndefined

from a11y_scout.logger import logger
from a11y_scout.models import PageReport

__all__ = ["NO_VIOLATIONS", "format_report", "inline_code"]

NO_VIOLATIONS = "No accessibility violations found."

_TEMPLATE_SOURCE = """\
# Accessibility report: {{ path }}

- URL: {{ url }}
- Generated: {{ generated_at }}

{% if violations %}
{{ violations|length }} violation(s) found.
{% for v in violations %}

## {{ v.rule_id }} ({{ v.impact }})

{{ v.description }}
{% if v.help_url %}

Help: {{ v.help_url }}
{% endif %}
{% if v.nodes %}

Affected nodes:

{% for node in v.nodes %}
- {{ node|code }}
{% endfor %}
{% endif %}
{% endfor %}
{% else %}
{{ sentinel }}
{% endif %}
"""

_BACKTICKS_RE = re.compile(r"`+")


def inline_code(text: str) -> str:
    """Wrap *text* in a markdown code span long enough to hold its own backticks."""
    flat = " ".join(str(text).split())
    longest = max((len(m) for m in _BACKTICKS_RE.findall(flat)), default=0)
    fence = "`" * (longest + 1)
    if longest:
        return f"{fence} {flat} {fence}"
    return f"{fence}{flat}{fence}"


def _build_environment() -> Environment:
    env = Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["code"] = inline_code
    return env


_TEMPLATE = _build_environment().from_string(_TEMPLATE_SOURCE)


def _fallback(report: PageReport) -> str:
    lines = [f"# Accessibility report: {report.path}", "", f"- URL: {report.url}", ""]
    if not report.violations:
        lines.append(NO_VIOLATIONS)
    for v in report.violations:
        lines.append(f"- {v.rule_id} ({v.impact}): {v.description}")
    return "\n".join(lines) + "\n"


def format_report(report: PageReport) -> str:
    """Render *report* as markdown. Never raises."""
    try:
        return _TEMPLATE.render(
            path=report.path,
            url=report.url,
            generated_at=report.generated_at.isoformat(),
            violations=report.violations,
            sentinel=NO_VIOLATIONS,
        )
    except Exception as exc:
        logger.error("Report template failed for %s: %s", report.url, exc)
        return _fallback(report)
