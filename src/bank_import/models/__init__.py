"""Data models and structures"""

from .core import (
    ColumnLayout,
    ParsedTransaction,
    ParseResult,
    ParserConfig,
    TransactionType,
)

__all__ = [
    'ColumnLayout',
    'ParsedTransaction',
    'ParseResult',
    'ParserConfig',
    'TransactionType',
]
