"""Bank statement CSV import for French banks"""

from .models import ParsedTransaction, ParseResult, ParserConfig, TransactionType
from .registry import (
    BANK_TEMPLATES, ParserRegistry, get_all_parsers, get_parser, get_parser_info, parse_import
)

__version__ = "0.1.0"

__all__ = [
    'ParsedTransaction',
    'ParseResult',
    'ParserConfig',
    'TransactionType',
    'BANK_TEMPLATES',
    'ParserRegistry',
    'get_all_parsers',
    'get_parser',
    'get_parser_info',
    'parse_import',
]
