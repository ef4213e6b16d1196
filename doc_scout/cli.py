# === FILE: doc_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа DocScout через командную строку.

Команды:
  scrape    Обойти документацию от seed URL и вывести/сохранить отчёт
  config    Показать итоговую конфигурацию (файл + опции)
  split     Разбить файл на чанки ограниченного размера

Общие опции:
  --config PATH       YAML/JSON-конфиг с параметрами ScrapeOptions
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования
  --version, -v       Показать версию DocScout

Пример:
  doc-scout scrape https://example.com/docs/ --max-pages 50 --json report.json --pretty
  doc-scout split README.md --max-size 2000
"""
import asyncio
import json
import signal
import sys
from pathlib import Path

import click

from doc_scout import __version__
from doc_scout.config import CrawlScope, ScrapeMode, load_config
from doc_scout.engine import start_scan
from doc_scout.errors import SplitError
from doc_scout.logger import init_logging, logger
from doc_scout.report.html_report import render_html
from doc_scout.report.json_report import render_json
from doc_scout.splitter import SPLITTER_KINDS, split_content
from doc_scout.utils import decode_content

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _build_options(ctx, **overrides):
    try:
        return load_config(ctx.obj["config_path"], **overrides)
    except Exception as e:
        print_error(f"Ошибка загрузки конфигурации: {e}")


def _print_progress(progress) -> None:
    click.echo(
        f"[{progress.completed}/{progress.total}] depth {progress.depth}: {progress.current_url}",
        err=True,
    )


async def _run_scrape(options, scan_timeout, on_progress):
    """Ctrl-C и --scan-timeout останавливают обход мягко: отчёт будет частичным."""
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.set)
    except (NotImplementedError, RuntimeError) as e:
        logger.debug("SIGINT handler not installed: %s", e)
    timer = loop.call_later(scan_timeout, cancel.set) if scan_timeout else None
    try:
        return await start_scan(options, on_progress=on_progress, cancel_event=cancel)
    finally:
        if timer is not None:
            timer.cancel()
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError) as e:
            logger.debug("SIGINT handler not removed: %s", e)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="DocScout, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Путь к файлу конфигурации YAML/JSON.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Уровень логирования",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Путь к файлу логов (stderr, если не указан)",
)
@click.option(
    "--log-format", "log_format",
    default="%(asctime)s %(levelname)s %(message)s",
    show_default=True,
    help="Строка формата для логов",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд DocScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command("scrape", context_settings=CONTEXT_SETTINGS)
@click.argument("url", required=False)
@click.option("--max-depth", "-d", type=click.IntRange(min=0), default=None, help="Макс. глубина обхода")
@click.option("--max-pages", "-l", type=click.IntRange(min=1), default=None, help="Макс. число загруженных страниц")
@click.option("--max-concurrency", type=click.IntRange(min=1), default=None, help="Одновременных загрузок")
@click.option("--scope", type=click.Choice([s.value for s in CrawlScope]), default=None, help="Область обхода")
@click.option("--include", "include_patterns", multiple=True, help="Glob или /regex/ для включения (повторяемая)")
@click.option("--exclude", "exclude_patterns", multiple=True, help="Glob или /regex/ для исключения (повторяемая)")
@click.option("--mode", "scrape_mode", type=click.Choice([m.value for m in ScrapeMode]), default=None,
              help="fetch | playwright | auto")
@click.option("--follow-redirects/--no-follow-redirects", default=None, help="Следовать 3xx-редиректам")
@click.option("--exclude-selector", "exclude_selectors", multiple=True, help="CSS-селектор для удаления из HTML")
@click.option(
    "--json", "-j", "json_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Сохранить JSON-отчёт в файл",
)
@click.option(
    "--html", "-h", "html_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Сохранить HTML-отчёт в файл",
)
@click.option(
    "--template", "-t", "template_dir",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Папка с Jinja2-шаблоном report.html.j2 (по умолчанию встроенный)",
)
@click.option("--pretty", is_flag=True, help="Преформатировать JSON-вывод (отступ 2)")
@click.option("--progress", is_flag=True, help="Печатать прогресс в stderr")
@click.option("--scan-timeout", "scan_timeout", type=float, default=None,
              help="Таймаут всего обхода (секунд); по истечении отчёт частичный")
@click.pass_context
def scrape(
    ctx, url, max_depth, max_pages, max_concurrency, scope, include_patterns, exclude_patterns,
    scrape_mode, follow_redirects, exclude_selectors, json_output, html_output, template_dir,
    pretty, progress, scan_timeout,
):
    """Обойти документацию и сгенерировать отчёты."""
    options = _build_options(
        ctx,
        url=url,
        max_depth=max_depth,
        max_pages=max_pages,
        max_concurrency=max_concurrency,
        scope=scope,
        include_patterns=list(include_patterns) or None,
        exclude_patterns=list(exclude_patterns) or None,
        scrape_mode=scrape_mode,
        follow_redirects=follow_redirects,
        exclude_selectors=list(exclude_selectors) or None,
    )
    click.echo(f"Starting scrape: {options.url}", err=True)
    try:
        report = asyncio.run(_run_scrape(options, scan_timeout, _print_progress if progress else None))
    except Exception as e:
        print_error(f"Ошибка при обходе: {e}")

    # без файлов отчёт идёт в stdout
    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f"JSON report: {saved_json}")
        except Exception as e:
            print_error(f"Ошибка при сохранении JSON: {e}")

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f"HTML report: {saved_html}")
        except Exception as e:
            print_error(f"Ошибка при сохранении HTML: {e}")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.option("--url", default=None, help="Seed URL, если его нет в файле конфигурации")
@click.pass_context
def show_config(ctx, url):
    """Показать итоговую конфигурацию в JSON."""
    options = _build_options(ctx, url=url)
    click.echo(options.model_dump_json(indent=2))


@cli.command("split", context_settings=CONTEXT_SETTINGS)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-size", "-s", "max_size", type=click.IntRange(min=1), default=None,
              help="Бюджет чанка в байтах (по умолчанию chunk_size из конфига или 5000)")
@click.option("--kind", type=click.Choice(SPLITTER_KINDS), default="auto", show_default=True,
              help="Какой сплиттер использовать")
@click.option("--language", default=None, help="Язык для --kind code")
@click.option("--pretty", is_flag=True, help="Преформатировать JSON-вывод (отступ 2)")
@click.pass_context
def split(ctx, path, max_size, kind, language, pretty):
    """Разбить файл на чанки и вывести их как JSON."""
    if max_size is None:
        max_size = 5000
        if ctx.obj["config_path"] is not None:
            max_size = _build_options(ctx).chunk_size
    content = decode_content(path.read_bytes())
    try:
        chunks = split_content(content, max_size, kind=kind, language=language)
    except SplitError as e:
        print_error(f"Ошибка разбиения: {e}")
    data = [{"content": c.content, "size": c.size, "metadata": c.metadata} for c in chunks]
    click.echo(json.dumps(data, ensure_ascii=False, indent=2 if pretty else None))


if __name__ == "__main__":
    cli()
