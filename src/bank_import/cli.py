"""Command-line interface for the bank statement importer."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
import logging

from .models.core import ParseResult
from .registry import BANK_TEMPLATES, ParserRegistry
from .utils.config_manager import ConfigManager
from .utils.csv_writer import CSVWriter
from .utils.error_handler import setup_logging


logger = logging.getLogger(__name__)


class BankImportCLI:
    """Wires configuration, registry and export together for the commands"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        self.registry = ParserRegistry(self.config)
        self.csv_writer = CSVWriter()

    def import_file(self, file_path: str, bank_key: str, mime_type: str = 'text/csv') -> ParseResult:
        content = Path(file_path).read_bytes()
        logger.info(f"Read {len(content)} bytes from {file_path}")
        return asyncio.run(self.registry.parse_import(bank_key, content, mime_type))

    def generate_config_template(self, output_path: str) -> bool:
        try:
            self.config_manager.save_config_template(output_path)
            return True
        except OSError as e:
            logger.error(f"Failed to generate config template: {e}")
            return False


def _print_table(cli_instance: BankImportCLI, result: ParseResult) -> None:
    for date, kind, amount, description, category in cli_instance.csv_writer.summary_rows(result):
        line = f"{date}  {kind:<7}  {amount:>12}  {description}"
        if category:
            line += f"  [{category}]"
        click.echo(line)


@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--json-logs', is_flag=True, help='Emit log records as JSON')
@click.pass_context
def cli(ctx, config, verbose, json_logs):
    """Bank Import - Parse French bank CSV exports into normalized transactions"""

    setup_logging(verbose=verbose, json_logs=json_logs)

    ctx.ensure_object(dict)
    ctx.obj['cli'] = BankImportCLI(config)


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--bank', '-b', 'bank_key', default='other', show_default=True,
              help='Bank key or name selecting the parser')
@click.option('--mime-type', default='text/csv', show_default=True, help='MIME type of the file')
@click.option('--output', '-o', help='Write parsed transactions to this CSV file')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']), default='table',
              help='Console output format')
@click.pass_context
def parse(ctx, file_path, bank_key, mime_type, output, output_format):
    """Parse a bank export file"""

    cli_instance = ctx.obj['cli']
    result = cli_instance.import_file(file_path, bank_key, mime_type)

    if output_format == 'json':
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.success:
        parser = cli_instance.registry.get_parser(bank_key)
        click.echo(f"✓ {result.transaction_count} transactions parsed with {parser.name}")
        _print_table(cli_instance, result)
        for warning in result.warnings or ():
            click.echo(f"  ⚠ {warning}")

    if not result.success:
        if output_format == 'table':
            for error in result.errors or ():
                click.echo(f"✗ {error}")
        sys.exit(1)

    if output:
        if cli_instance.csv_writer.write_transactions(result, output):
            click.echo(f"  Output: {output}", err=output_format == 'json')
        else:
            click.echo(f"✗ Nothing written to {output}", err=True)
            sys.exit(1)


@cli.command()
@click.pass_context
def banks(ctx):
    """List bank keys and the parser each one selects"""

    registry = ctx.obj['cli'].registry

    click.echo("Bank templates")
    click.echo("=" * 40)
    for template in BANK_TEMPLATES:
        click.echo(f"  {template.template:<16} {template.label} ({template.parser})")
    click.echo()

    click.echo("Bank keys")
    click.echo("=" * 40)
    for key in registry.bank_keys():
        info = registry.get_parser_info(key)
        click.echo(f"  {key:<28} -> {info['name']} [{', '.join(info['supported_mime_types'])}]")


@cli.command()
@click.argument('output_path', default='bank_import.json')
@click.option('--format', type=click.Choice(['json', 'yaml']), default='json', help='Configuration file format')
@click.pass_context
def init_config(ctx, output_path, format):
    """Generate configuration template file"""

    cli_instance = ctx.obj['cli']

    # Adjust extension based on format
    if format == 'yaml' and not output_path.endswith(('.yml', '.yaml')):
        output_path = output_path.replace('.json', '.yml')
        if not output_path.endswith('.yml'):
            output_path += '.yml'
    elif format == 'json' and not output_path.endswith('.json'):
        output_path = output_path.replace('.yml', '.json').replace('.yaml', '.json')
        if not output_path.endswith('.json'):
            output_path += '.json'

    if cli_instance.generate_config_template(output_path):
        click.echo(f"✓ Configuration template generated: {output_path}")
        click.echo("  Edit the file to add bank aliases or column keywords")
    else:
        click.echo("✗ Failed to generate configuration template")
        sys.exit(1)


if __name__ == '__main__':
    cli()
