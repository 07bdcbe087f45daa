# === FILE: site_audit/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteAudit через командную строку.

Команды:
  scan      Аудит страниц сайта (интерактивно или по флагам)
  report    Сводка по файлу результатов (stdout, JSON, HTML)
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда scan опции:
  --url URL           Сайт или sitemap; без него вопросы задаются интерактивно
  --mode 1|2|3        1 — весь sitemap, 2 — пакетами, 3 — одна страница
  --batch-size N      Сколько страниц проверить за запуск в режиме 2
  --page URL          Страница для режима 3
  --output PATH       Файл результатов (override output_file)

Дополнительно:
  --version, -v       Показать версию SiteAudit

Пример:
  site-audit scan --url example.com --mode 2 --batch-size 20
"""
import json
import sys
from pathlib import Path

import click

from site_audit import __version__
from site_audit.aggregator import aggregate_results
from site_audit.config import load_config
from site_audit.engine import Engine
from site_audit.interactive_cli import ConsoleInputProvider, ScriptedInputProvider
from site_audit.logger import init_logging, logger
from site_audit.report.html_report import render_html
from site_audit.report.json_report import render_json
from site_audit.store import load_results

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteAudit, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteAudit CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'site_url', default=None, help='URL сайта или sitemap.xml')
@click.option(
    '--mode', '-m', 'mode',
    default=None,
    type=click.Choice(['1', '2', '3']),
    help='Режим: 1 — весь sitemap, 2 — пакетами, 3 — одна страница'
)
@click.option('--batch-size', '-b', 'batch_size', default=None, help='Размер пакета для режима 2')
@click.option('--page', '-p', 'page_url', default=None, help='URL страницы для режима 3')
@click.option(
    '--output', '-o', 'output_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Файл результатов (override output_file)'
)
@click.pass_context
def scan(ctx, site_url, mode, batch_size, page_url, output_file):
    """Запустить аудит страниц сайта с возобновлением по файлу результатов."""
    cfg = ctx.obj['config']
    if output_file is not None:
        cfg = cfg.model_copy(update={'output_file': output_file})

    if site_url:
        provider = ScriptedInputProvider(
            site_url,
            mode=mode,
            batch_size=batch_size,
            single_url=page_url,
            default_batch_size=cfg.default_batch_size,
        )
    else:
        ignored = [flag for flag, value in
                   (('--mode', mode), ('--batch-size', batch_size), ('--page', page_url)) if value is not None]
        if ignored:
            logger.warning('%s ignored without --url, answers will be asked interactively', ', '.join(ignored))
        provider = ConsoleInputProvider(default_batch_size=cfg.default_batch_size)

    try:
        summary = Engine(cfg).start_scan(provider)
    except KeyboardInterrupt:
        print_error(f'Сканирование прервано, результаты сохранены в {cfg.output_file}')

    if summary is None:
        print_error('Сканирование не выполнено, подробности в логе')

    click.echo(
        f'Audited: {summary.audited} (failed: {summary.failed}), '
        f'skipped: {summary.skipped}, remaining: {summary.remaining}'
    )
    click.echo(f'Results: {cfg.output_file}')


@cli.command('report', context_settings=CONTEXT_SETTINGS)
@click.argument(
    'results_path',
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-сводку в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-сводку в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном report.html.j2'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def report(ctx, results_path, json_output, html_output, template_dir, pretty):
    """Сводка по файлу результатов аудита."""
    path = results_path or ctx.obj['config'].output_file
    if not Path(path).exists():
        print_error(f'Файл результатов не найден: {path}')
    summary = aggregate_results(load_results(path))

    if not json_output and not html_output:
        click.echo(summary.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(summary, json_output)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(summary, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(json.dumps(cfg.model_dump(mode='json'), ensure_ascii=False, indent=2))


if __name__ == "__main__":
    cli()
