"""Core data models for the bank statement import pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple


class TransactionType(str, Enum):
    """Direction of a parsed transaction"""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


@dataclass(frozen=True)
class ParsedTransaction:
    """Normalized transaction produced by every bank parser.

    Attributes:
        date: Transaction date (noon when the source only had a date)
        description: Raw bank label, trimmed
        amount: Non-negative magnitude; the sign is carried by ``type``
        type: INCOME or EXPENSE
        bank_category: Category label assigned by the bank, if exported
        reference: Bank transaction reference, if exported
        raw_data: Diagnostic payload (original line, row index, raw cells)
    """
    date: datetime
    description: str
    amount: Decimal
    type: TransactionType
    bank_category: Optional[str] = None
    reference: Optional[str] = None
    raw_data: Optional[Dict[str, Any]] = field(default=None, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'date': self.date.isoformat(),
            'description': self.description,
            'amount': str(self.amount),
            'type': self.type.value,
            'bank_category': self.bank_category,
            'reference': self.reference,
            'raw_data': dict(self.raw_data) if self.raw_data else None,
        }


@dataclass(frozen=True)
class ParseResult:
    """Envelope returned by a parse call.

    ``transactions`` is None whenever ``success`` is False. ``errors`` and
    ``warnings`` are None when empty.
    """
    success: bool
    transactions: Optional[Tuple[ParsedTransaction, ...]] = None
    errors: Optional[Tuple[str, ...]] = None
    warnings: Optional[Tuple[str, ...]] = None

    @classmethod
    def failure(cls, *errors: str) -> 'ParseResult':
        return cls(success=False, errors=tuple(errors))

    @property
    def transaction_count(self) -> int:
        return len(self.transactions) if self.transactions else 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'success': self.success,
            'transactions': (
                [t.to_dict() for t in self.transactions]
                if self.transactions is not None else None
            ),
            'errors': list(self.errors) if self.errors else None,
            'warnings': list(self.warnings) if self.warnings else None,
        }


@dataclass(frozen=True)
class ColumnLayout:
    """Header positions resolved once per file.

    Every index is optional; ``value`` returns an empty string for a column
    that was not found or a row that is too short.
    """
    date: Optional[int] = None
    description: Optional[int] = None
    amount: Optional[int] = None
    debit: Optional[int] = None
    credit: Optional[int] = None
    category: Optional[int] = None
    reference: Optional[int] = None
    extra: Dict[str, int] = field(default_factory=dict, hash=False)

    def has(self, name: str) -> bool:
        return self.index_of(name) is not None

    def index_of(self, name: str) -> Optional[int]:
        if name in self.extra:
            return self.extra[name]
        return getattr(self, name, None)

    def value(self, fields: List[str], name: str) -> str:
        index = self.index_of(name)
        if index is None or index >= len(fields):
            return ''
        return fields[index].strip()


@dataclass
class ParserConfig:
    """Configuration for parser behavior"""
    fallback_encoding: str = "windows-1252"
    utf8_scan_limit: int = 4096
    default_bank_key: str = "other"
    delimiters: Optional[List[str]] = None
    bank_aliases: Optional[Dict[str, str]] = None
    column_keywords: Optional[Dict[str, List[str]]] = None
    date_formats: Optional[List[str]] = None

    def __post_init__(self):
        if self.delimiters is None:
            self.delimiters = [",", ";", "\t", "|"]
        if self.bank_aliases is None:
            self.bank_aliases = {}
        if self.column_keywords is None:
            self.column_keywords = {}
        if self.date_formats is None:
            self.date_formats = [
                "%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y", "%d.%m.%Y",
                "%Y/%m/%d", "%d/%m/%y", "%Y-%m-%d %H:%M:%S",
                "%d/%m/%Y %H:%M:%S", "%d %B %Y", "%d %b %Y",
                "%B %d, %Y", "%b %d, %Y"
            ]
