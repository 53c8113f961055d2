"""Generic CSV parser.

Fallback used for banks without a dedicated parser. It guesses the
delimiter from the header, finds columns by keyword in several languages
and accepts French, ISO and US dates as well as French or international
number formatting.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from .base import LEADING_NUMBER, BankParser, DataTransformer, find_containing
from ..models.core import ColumnLayout, ParserConfig, TransactionType
from ..utils.csv_tokenizer import detect_delimiter
from ..utils.error_handler import MissingColumnError
from ..utils.sign_detector import DebitConvention, TransactionSignDetector


logger = logging.getLogger(__name__)

DEFAULT_COLUMN_KEYWORDS: Dict[str, List[str]] = {
    'date': ['date', 'datum', 'fecha'],
    'description': ['description', 'libellé', 'libelle', 'label', 'memo', 'narrative'],
    'amount': ['amount', 'montant', 'betrag', 'importe'],
    'debit': ['debit', 'débit', 'withdrawal', 'sortie'],
    'credit': ['credit', 'crédit', 'deposit', 'entrée'],
    'category': ['category', 'catégorie', 'categorie', 'type'],
}

_SLASH_DATE = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')
_ISO_DATE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')
_ISO_DATETIME = re.compile(r'^(\d{4}-\d{2}-\d{2})[T ](\d{2}:\d{2}(?::\d{2})?)')
_CURRENCY_AND_SPACES = re.compile(r'[€$£¥\s]')


class GenericCSVParser(BankParser):
    """Heuristic parser for CSV exports of any bank"""

    bank_key = 'other'
    name = 'Generic CSV'
    supported_mime_types = ['text/csv']

    def __init__(self, config: Optional[ParserConfig] = None):
        super().__init__(config)
        self.sign_detector = TransactionSignDetector(DebitConvention.ABSOLUTE)
        self.column_keywords = dict(DEFAULT_COLUMN_KEYWORDS)
        self.column_keywords.update(self.config.column_keywords or {})

    @property
    def requires_transactions(self) -> bool:
        return True

    def choose_delimiter(self, header_line: str) -> str:
        delimiter = detect_delimiter(header_line, self.config.delimiters)
        logger.debug(f"Detected delimiter {delimiter!r}")
        return delimiter

    def resolve_columns(self, headers: List[str]) -> ColumnLayout:
        found = {
            role: find_containing(headers, keywords)
            for role, keywords in self.column_keywords.items()
        }
        layout = ColumnLayout(
            date=found.get('date'),
            description=found.get('description'),
            amount=found.get('amount'),
            debit=found.get('debit'),
            credit=found.get('credit'),
            category=found.get('category'),
        )

        if layout.date is None:
            raise MissingColumnError(
                'Could not find date column. Expected columns: date, datum, fecha'
            )
        if layout.description is None:
            raise MissingColumnError(
                'Could not find description column. Expected: description, libellé, label, memo'
            )
        if layout.amount is None and layout.debit is None and layout.credit is None:
            raise MissingColumnError(
                'Could not find amount column(s). Expected: amount, montant, debit/credit'
            )

        return layout

    def parse_date(self, date_str: str) -> Optional[datetime]:
        """Try French, ISO and US dates, then the configured formats"""
        date_str = (date_str or '').strip()
        if not date_str:
            return None

        match = _SLASH_DATE.match(date_str)
        if match:
            first, second, year = (int(part) for part in match.groups())
            # Day-first unless that reading is impossible, then MM/DD/YYYY
            return DataTransformer.at_noon(year, second, first) or DataTransformer.at_noon(year, first, second)

        match = _ISO_DATE.match(date_str)
        if match:
            year, month, day = (int(part) for part in match.groups())
            return DataTransformer.at_noon(year, month, day)

        match = _ISO_DATETIME.match(date_str)
        if match:
            time_part = match.group(2) if match.group(2).count(':') == 2 else match.group(2) + ':00'
            try:
                return datetime.strptime(f"{match.group(1)} {time_part}", "%Y-%m-%d %H:%M:%S")
            except ValueError:
                return None

        return self._parse_with_formats(date_str)

    def _parse_with_formats(self, date_str: str) -> Optional[datetime]:
        for fmt in self.config.date_formats:
            try:
                parsed = datetime.strptime(date_str, fmt)
            except ValueError:
                continue
            if '%H' in fmt:
                return parsed
            return parsed.replace(hour=12, minute=0, second=0)
        return None

    def parse_number(self, num_str: str) -> Decimal:
        """Parse a number whose decimal separator is the rightmost of ',' and '.'.

        Unparseable input yields zero rather than an error.
        """
        if not num_str:
            return Decimal('0')

        cleaned = _CURRENCY_AND_SPACES.sub('', num_str)
        last_comma = cleaned.rfind(',')
        last_dot = cleaned.rfind('.')

        if last_comma > last_dot:
            # 1.234,56 or 1234,56
            cleaned = cleaned.replace('.', '').replace(',', '.', 1)
        elif last_dot > last_comma:
            # 1,234.56 or 1234.56
            cleaned = cleaned.replace(',', '')

        match = LEADING_NUMBER.match(cleaned)
        if not match:
            return Decimal('0')
        try:
            return Decimal(match.group(0))
        except InvalidOperation:
            return Decimal('0')

    def resolve_amount(self, fields: List[str],
                       layout: ColumnLayout) -> Optional[Tuple[Decimal, TransactionType]]:
        has_debit = layout.debit is not None
        has_credit = layout.credit is not None

        if has_debit or has_credit:
            debit = self.parse_number(layout.value(fields, 'debit')) if has_debit else Decimal('0')
            credit = self.parse_number(layout.value(fields, 'credit')) if has_credit else Decimal('0')
            if (has_debit and has_credit) or layout.amount is None:
                return self.sign_detector.from_debit_credit(debit, credit)

        amount = self.parse_number(layout.value(fields, 'amount'))
        return self.sign_detector.from_signed_amount(amount)

