# File: tests/test_report.py
from datetime import datetime, timezone

import pytest
import yaml

import a11y_scout.report.markdown_report as markdown_report
from a11y_scout.models import PageReport
from a11y_scout.report.markdown_report import NO_VIOLATIONS, format_report, inline_code
from a11y_scout.report.store import (
    INDEX_NAME,
    MAX_SLUG_CHARS,
    ReportStore,
    artifact_name,
    report_slug,
)
from conftest import make_violation, url

GENERATED = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# --------------------------------------------------------------------------- #
#                                  Formatter                                  #
# --------------------------------------------------------------------------- #


def test_empty_report_renders_sentinel_body():
    text = format_report(PageReport(url("/"), [], GENERATED))
    assert text.startswith("# Accessibility report: /\n")
    assert text.rstrip("\n").split("\n\n")[-1] == NO_VIOLATIONS


def test_violations_keep_supplied_order_and_details():
    report = PageReport(
        url("/contact"),
        [
            make_violation("label", "serious", ['<input id="email">', '<input id="name">']),
            make_violation("image-alt", "critical", ['<img src="a.png">']),
        ],
        GENERATED,
    )
    text = format_report(report)

    assert NO_VIOLATIONS not in text
    assert "2 violation(s) found." in text
    assert text.index("## label (serious)") < text.index("## image-alt (critical)")
    assert "label must pass" in text
    assert "Help: https://dequeuniversity.com/rules/axe/4.9/label" in text
    assert '- `<input id="email">`\n- `<input id="name">`' in text
    assert "- URL: https://site.test/contact" in text
    assert "- Generated: 2026-10-19T12:00:00+00:00" in text


def test_inline_code_handles_backticks_and_newlines():
    assert inline_code("<b>x</b>") == "`<b>x</b>`"
    assert inline_code("<p>a `b`</p>") == "`` <p>a `b`</p> ``"
    assert inline_code("<div>\n  text\n</div>") == "`<div> text </div>`"


def test_formatter_never_raises(monkeypatch):
    class Broken:
        def render(self, **_):
            raise RuntimeError("template exploded")

    monkeypatch.setattr(markdown_report, "_TEMPLATE", Broken())
    empty = format_report(PageReport(url("/"), [], GENERATED))
    assert NO_VIOLATIONS in empty
    full = format_report(PageReport(url("/a"), [make_violation()], GENERATED))
    assert "image-alt (critical)" in full
    # same heading as the template, keyed by path
    assert empty.startswith("# Accessibility report: /\n")
    assert full.startswith("# Accessibility report: /a\n")


# --------------------------------------------------------------------------- #
#                                    Store                                    #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "path,slug",
    [
        ("/", "home"),
        ("", "home"),
        ("/about", "about"),
        ("/about/team", "about-team"),
        ("/about/team/", "about-team"),
        ("/a b/ü?x=1", "a_b-_"),
    ],
)
def test_report_slug(path, slug):
    assert report_slug(f"https://site.test{path}") == slug


def test_artifact_name():
    assert artifact_name(url("/")) == "a11y-home.md"
    assert artifact_name(url("/contact")) == "a11y-contact.md"


def test_store_is_last_write_wins(tmp_path):
    store = ReportStore(tmp_path / "out")
    first = store.write(url("/contact"), "first run\n")
    second = store.write(url("/contact"), "second run\n")
    assert first == second == tmp_path / "out" / "a11y-contact.md"
    assert store.read(url("/contact")) == "second run\n"
    assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["a11y-contact.md"]


def test_store_adds_frontmatter_once(tmp_path):
    store = ReportStore(tmp_path, frontmatter=True, tags=("accessibility", "python"))
    store.write(url("/about/team"), "# body\n", GENERATED)
    text = store.read(url("/about/team"))

    _, meta_text, body = text.split("---\n", 2)
    meta = yaml.safe_load(meta_text)
    assert meta == {
        "title": "Accessibility report: /about/team",
        "tags": ["accessibility", "python"],
        "description": "",
        "date": "2026-10-19",
    }
    assert body == "\n# body\n"

    store.write(url("/x"), "---\ntitle: given\n---\nbody\n", GENERATED)
    assert store.read(url("/x")).count("---\n") == 2


def test_write_index_lists_every_page(tmp_path):
    store = ReportStore(tmp_path)
    failed = PageReport(url("/broken"), [make_violation("audit-failed")], GENERATED)
    reports = [
        PageReport(url("/"), [], GENERATED),
        PageReport(url("/contact"), [make_violation(), make_violation("label")], GENERATED),
        failed,
    ]
    for report in reports[:2]:
        store.write(report.url, "body\n")
    index = store.write_index(reports).read_text(encoding="utf-8")
    assert (store.output_dir / INDEX_NAME).exists()
    assert "| / | 0 | [a11y-home.md](a11y-home.md) |" in index
    assert "| /contact | 2 | [a11y-contact.md](a11y-contact.md) |" in index
    assert "| /broken | audit failed | not stored |" in index


def test_long_paths_get_a_bounded_hashed_slug():
    first = report_slug(url("/" + "a" * 300))
    second = report_slug(url("/" + "a" * 301))
    assert len(first) == MAX_SLUG_CHARS + 9
    assert first != second
    assert first.startswith("a" * MAX_SLUG_CHARS + "-")


def test_long_path_report_can_be_written(tmp_path):
    store = ReportStore(tmp_path)
    path = store.write(url("/" + "x" * 400), "body\n")
    assert len(path.name.encode("utf-8")) < 255
    assert store.read(url("/" + "x" * 400)) == "body\n"


def test_colliding_slugs_get_distinct_artifacts(tmp_path):
    store = ReportStore(tmp_path)
    pages = [url("/a-b"), url("/a/b"), url("/home"), url("/")]
    paths = [store.write(page, f"report for {page}\n") for page in pages]

    assert len(set(paths)) == len(pages)
    assert paths[0].name == "a11y-a-b.md"
    assert paths[2].name == "a11y-home.md"
    assert paths[3].name.startswith("a11y-home-")
    for page in pages:
        assert store.read(page) == f"report for {page}\n"
    # a rerun of the same page keeps its file
    assert store.write(url("/a/b"), "again\n") == paths[1]
