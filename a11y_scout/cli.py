# File: a11y_scout/cli.py
"""
Командная строка A11y Scout.

    a11y-scout [ОБЩИЕ ОПЦИИ] crawl [--json PATH] [--pretty] [--dry-run] [--timeout SEC]
                                   [--output-dir DIR] [--concurrency N]
    a11y-scout [ОБЩИЕ ОПЦИИ] config

Общие опции задают конфиг (--config), переопределяют глубину обхода
(--max-depth) и настраивают логирование (--log-level, --log-file,
--log-format). Любая ошибка выводится красным в stderr, код выхода 1.

Пример:
  a11y-scout -c configs/default.yaml -d 1 crawl --dry-run --json out/summary.json --pretty
"""
import asyncio
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from pydantic import ValidationError

from a11y_scout import __version__
from a11y_scout.config import CrawlConfig, load_config
from a11y_scout.engine import start_audit
from a11y_scout.logger import DEFAULT_FORMAT, init_logging
from a11y_scout.summary import CrawlSummary

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def print_error(message: str) -> NoReturn:
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _override(cfg: CrawlConfig, **changes: Any) -> CrawlConfig:
    """Новый CrawlConfig с изменёнными полями; значения None пропускаются."""
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        return cfg
    data = cfg.model_dump(mode="json")
    data.update(changes)
    return CrawlConfig.model_validate(data)


def _echo_summary(summary: CrawlSummary) -> None:
    statuses = {o.url: o.status for o in summary.issues}
    for report in summary.reports:
        state = "audit failed" if report.audit_failed else f"{len(report.findings)} violation(s)"
        click.echo(f"  {report.path}: {state} [{statuses.get(report.url, '-')}]")
    click.echo(
        f"Pages audited: {summary.pages_audited}, "
        f"violations: {summary.violation_count}, "
        f"audit failures: {summary.audit_failures}"
    )
    counts = summary.issue_counts()
    click.echo("Issues: " + (", ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "none"))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="A11y Scout, version %(version)s")
@click.option("--config", "-c", "config_path", default="configs/default.yaml", show_default=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="YAML или JSON файл конфигурации.")
@click.option("--max-depth", "-d", type=int, default=None,
              help="Сколько переходов от корня разрешено (перекрывает max_depth).")
@click.option("--log-level", default="INFO", show_default=True,
              type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Уровень логирования.")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False, path_type=Path),
              help="Дополнительно писать логи в файл (с ротацией).")
@click.option("--log-format", default=DEFAULT_FORMAT, show_default=True,
              help="Формат записей лога (logging.Formatter).")
@click.pass_context
def cli(ctx, config_path, max_depth, log_level, log_file, log_format):
    """A11y Scout: обход сайта, аудит доступности, отчёты и задачи."""
    init_logging(level=log_level, log_file=log_file, log_format=log_format)
    try:
        cfg = _override(load_config(config_path), max_depth=max_depth)
    except ValidationError as e:
        print_error(f"Конфигурация не прошла проверку:\n{e}")
    except (OSError, ValueError, TypeError) as e:
        print_error(f"Не удалось прочитать конфигурацию: {e}")
    ctx.obj = {"config": cfg}


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.option("--json", "-j", "json_output", default=None,
              type=click.Path(dir_okay=False, path_type=Path), help="Сохранить сводку в JSON-файл.")
@click.option("--pretty", is_flag=True, help="JSON с отступами.")
@click.option("--dry-run", is_flag=True, help="Проверять трекер, но не создавать задачи.")
@click.option("--timeout", type=float, default=None, help="Ограничение на весь обход (секунд).")
@click.option("--output-dir", "-o", default=None, type=click.Path(file_okay=False, path_type=Path),
              help="Папка для отчётов (перекрывает output_dir).")
@click.option("--concurrency", type=int, default=None,
              help="Сколько страниц проверять параллельно (перекрывает concurrency).")
@click.pass_context
def crawl(ctx, json_output, pretty, dry_run, timeout, output_dir, concurrency):
    """Обойти сайт, сохранить отчёты по страницам и завести задачи."""
    try:
        cfg = _override(
            ctx.obj["config"],
            output_dir=str(output_dir) if output_dir else None,
            concurrency=concurrency,
        )
    except ValidationError as e:
        print_error(f"Неверные параметры обхода:\n{e}")

    click.echo(f"Crawling {cfg.base_url} (max depth {cfg.max_depth})")
    job = start_audit(cfg, dry_run=dry_run)
    try:
        summary = asyncio.run(asyncio.wait_for(job, timeout) if timeout else job)
    except asyncio.TimeoutError:
        print_error(f"Обход не завершён за {timeout} секунд")
    except Exception as e:
        print_error(f"Обход прерван: {e}")

    _echo_summary(summary)

    if json_output:
        try:
            json_output.parent.mkdir(parents=True, exist_ok=True)
            json_output.write_text(summary.json(pretty=pretty), encoding="utf-8")
        except OSError as e:
            print_error(f"Не удалось сохранить JSON: {e}")
        click.echo(f"JSON summary: {json_output}")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Вывести действующую конфигурацию (JSON)."""
    click.echo(ctx.obj["config"].model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
