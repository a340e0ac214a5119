# cli.py

"""
Точка входа для запуска A11y Scout без установки пакета.

Пример запуска:
    python cli.py --config configs/default.yaml crawl --dry-run
"""
from a11y_scout.cli import cli

if __name__ == '__main__':
    cli()
