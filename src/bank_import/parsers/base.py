"""Abstract base classes and shared helpers for bank statement parsers."""

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..models.core import (
    ColumnLayout, ParsedTransaction, ParseResult, ParserConfig, TransactionType
)
from ..utils.csv_tokenizer import normalize_header, split_fields, split_lines
from ..utils.encoding import decode_csv_buffer
from ..utils.error_handler import ImportErrorHandler, ImportFileError, EmptyFileError


logger = logging.getLogger(__name__)

Content = Union[str, bytes, bytearray, memoryview]

# An optional trailing time is ignored
_FRENCH_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})(?:[ T]\d{1,2}:\d{2}(?::\d{2})?)?$')
_ISO_DATE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_WHITESPACE = re.compile(r'\s+')
LEADING_NUMBER = re.compile(r'^[+-]?(?:\d+(?:\.\d*)?|\.\d+)')


class DataTransformer:
    """Date and number conversions shared by the bank parsers"""

    @staticmethod
    def at_noon(year: int, month: int, day: int) -> Optional[datetime]:
        """Build a date-only timestamp at 12:00, or None if the date is impossible"""
        try:
            return datetime(year, month, day, 12, 0, 0)
        except ValueError:
            return None

    def parse_french_date(self, date_str: str) -> Optional[datetime]:
        """Parse DD/MM/YYYY (or DD/MM/YY) into a noon timestamp"""
        match = _FRENCH_DATE.match((date_str or '').strip())
        if not match:
            return None

        day, month, year = (int(part) for part in match.groups())
        if len(match.group(3)) == 2:
            year += 2000
        return self.at_noon(year, month, day)

    def parse_iso_date(self, date_str: str) -> Optional[datetime]:
        """Parse YYYY-MM-DD into a noon timestamp"""
        match = _ISO_DATE.match((date_str or '').strip())
        if not match:
            return None

        year, month, day = (int(part) for part in match.groups())
        return self.at_noon(year, month, day)

    def parse_french_number(self, num_str: str) -> Decimal:
        """Parse French-formatted numbers: "1 234,56", "+100,00", "-12,95".

        Spaces (including non-breaking ones) are thousands separators, the
        comma is the decimal separator and a leading ``+`` is allowed.
        Only the leading number is read, so "12,50 €" gives 12.50.
        Empty or unparseable input yields zero.
        """
        if not num_str or not num_str.strip():
            return Decimal('0')

        cleaned = _WHITESPACE.sub('', num_str).replace(',', '.', 1)
        if cleaned.startswith('+'):
            cleaned = cleaned[1:]

        match = LEADING_NUMBER.match(cleaned)
        if not match:
            return Decimal('0')
        try:
            return Decimal(match.group(0))
        except InvalidOperation:
            return Decimal('0')


def find_column(headers: List[str], predicate: Callable[[str], bool]) -> Optional[int]:
    """Index of the first normalized header matching ``predicate``"""
    for index, header in enumerate(headers):
        if predicate(header):
            return index
    return None


def find_exact(headers: List[str], aliases: Iterable[str]) -> Optional[int]:
    """Index of the first alias, in alias order, equal to a normalized header"""
    for alias in aliases:
        wanted = normalize_header(alias)
        index = find_column(headers, lambda h: h == wanted)
        if index is not None:
            return index
    return None


def find_containing(headers: List[str], keywords: Iterable[str]) -> Optional[int]:
    """Index of the first header containing a keyword, keywords tried in order"""
    for keyword in keywords:
        wanted = normalize_header(keyword)
        index = find_column(headers, lambda h: wanted in h)
        if index is not None:
            return index
    return None


class SkipRow(Exception):
    """Raised by a row hook to drop the current row with a warning"""

    def __init__(self, message: str, warning_type: str = 'AMOUNT_PARSE_ERROR',
                 raw_value: Optional[str] = None):
        super().__init__(message)
        self.warning_type = warning_type
        self.raw_value = raw_value


class BankParser(ABC):
    """Abstract base class for all bank statement parsers.

    ``parse`` decodes the content, splits it into rows, resolves the header
    once and then walks the data rows through the subclass hooks
    (``parse_date``, ``resolve_amount``, ``describe``). It never raises:
    every failure ends up in the returned ``ParseResult``.
    """

    bank_key: str = ''
    name: str = ''
    supported_mime_types: List[str] = ['text/csv']
    # None defers to ParserConfig.fallback_encoding
    legacy_encoding: Optional[str] = None
    delimiter: str = ';'

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.transformer = DataTransformer()

    def parse(self, content: Content, mime_type: str = 'text/csv') -> ParseResult:
        """Parse raw file content into a ``ParseResult``"""
        handler = ImportErrorHandler(self.name)

        try:
            text = self.decode(content)
            lines = split_lines(text)
            if len(lines) < 2:
                raise EmptyFileError()

            logger.debug(f"{self.name}: {len(lines) - 1} data rows ({mime_type})")
            self._parse_lines(lines, handler)
            if handler.has_warnings():
                logger.debug(f"{self.name}: skipped rows {handler.get_error_summary()}")
            return handler.build(require_transactions=self.requires_transactions)

        except ImportFileError as e:
            return handler.fail(str(e), e.error_type)
        except Exception as e:
            logger.exception(f"{self.name}: unexpected error while parsing")
            return handler.fail(str(e) or 'Unknown parsing error', 'UNEXPECTED_ERROR')

    async def parse_async(self, content: Content, mime_type: str = 'text/csv') -> ParseResult:
        """Coroutine form of ``parse``; runs to completion without suspending"""
        return self.parse(content, mime_type)

    @property
    def requires_transactions(self) -> bool:
        """Whether a file whose rows were all dropped counts as a failure"""
        return False

    def decode(self, content: Content) -> str:
        if isinstance(content, str):
            return content
        return decode_csv_buffer(
            bytes(content),
            self.legacy_encoding or self.config.fallback_encoding,
            self.config.utf8_scan_limit
        )

    def choose_delimiter(self, header_line: str) -> str:
        return self.delimiter

    def info(self) -> Dict[str, object]:
        return {
            'bank_key': self.bank_key,
            'name': self.name,
            'supported_mime_types': list(self.supported_mime_types),
        }

    def _parse_lines(self, lines: List[str], handler: ImportErrorHandler) -> None:
        delimiter = self.choose_delimiter(lines[0])
        headers = [normalize_header(h) for h in split_fields(lines[0], delimiter)]
        layout = self.resolve_columns(headers)
        logger.debug(f"{self.name}: resolved columns {layout}")

        for row_number, raw_line in enumerate(lines[1:], start=2):
            line = raw_line.strip()
            fields = split_fields(line, delimiter)

            date_str = layout.value(fields, 'date')
            date = self.parse_date(date_str)
            if date is None:
                handler.log_row_warning(
                    row_number, f'Invalid date "{date_str}"', 'DATE_PARSE_ERROR', date_str
                )
                continue

            try:
                resolved = self.resolve_amount(fields, layout)
            except SkipRow as skip:
                handler.log_row_warning(row_number, str(skip), skip.warning_type, skip.raw_value)
                continue

            if resolved is None:
                handler.log_row_warning(row_number, 'Amount is zero, skipping', 'ZERO_AMOUNT')
                continue

            amount, transaction_type = resolved
            raw_data = {'original_line': line, 'row_index': row_number}
            raw_data.update(self.raw_cells(fields, layout))

            handler.add_transaction(ParsedTransaction(
                date=date,
                description=self.describe(fields, layout),
                amount=amount,
                type=transaction_type,
                bank_category=self.category_of(fields, layout) or None,
                reference=layout.value(fields, 'reference') or None,
                raw_data=raw_data
            ))

    def describe(self, fields: List[str], layout: ColumnLayout) -> str:
        return layout.value(fields, 'description')

    def category_of(self, fields: List[str], layout: ColumnLayout) -> Optional[str]:
        return layout.value(fields, 'category')

    def raw_cells(self, fields: List[str], layout: ColumnLayout) -> Dict[str, str]:
        """Extra raw values kept in ``raw_data`` for auditing"""
        return {}

    @abstractmethod
    def resolve_columns(self, headers: List[str]) -> ColumnLayout:
        """Locate columns in the normalized header.

        Raises:
            MissingColumnError: If a required column is absent
        """
        pass

    @abstractmethod
    def parse_date(self, date_str: str) -> Optional[datetime]:
        """Parse one date cell, None when invalid"""
        pass

    @abstractmethod
    def resolve_amount(self, fields: List[str],
                       layout: ColumnLayout) -> Optional[Tuple[Decimal, TransactionType]]:
        """Magnitude and type of a row, None when the amount is zero.

        Raises:
            SkipRow: If the amount cannot be determined at all
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(bank_key={self.bank_key!r})"
