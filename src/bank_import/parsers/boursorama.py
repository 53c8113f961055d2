"""Boursorama CSV parser.

Format: dateOp;dateVal;label;category;categoryParent;supplierFound;amount;
comment;accountNum;accountLabel;accountbalance

UTF-8 with BOM, semicolon separated, ISO dates and signed French amounts
("-1234,56" for debits).
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .base import BankParser, find_exact
from ..models.core import ColumnLayout, TransactionType
from ..utils.error_handler import MissingColumnError
from ..utils.sign_detector import TransactionSignDetector


class BoursoramaParser(BankParser):
    """Parser for Boursorama Banque CSV exports"""

    bank_key = 'boursorama'
    name = 'Boursorama'
    supported_mime_types = ['text/csv']
    delimiter = ';'

    REQUIRED = {'date': 'dateOp', 'description': 'label', 'amount': 'amount'}
    OPTIONAL = ['dateVal', 'comment', 'accountbalance', 'categoryParent']

    sign_detector = TransactionSignDetector()

    def resolve_columns(self, headers: List[str]) -> ColumnLayout:
        required = {role: find_exact(headers, [column]) for role, column in self.REQUIRED.items()}
        missing = [self.REQUIRED[role] for role, index in required.items() if index is None]
        if missing:
            names = ', '.join(f'"{name}"' for name in missing)
            raise MissingColumnError(f'Could not find {names} column(s) in CSV')

        extra = {}
        for column in self.OPTIONAL:
            index = find_exact(headers, [column])
            if index is not None:
                extra[column] = index

        return ColumnLayout(
            date=required['date'],
            description=required['description'],
            amount=required['amount'],
            category=find_exact(headers, ['category']),
            extra=extra,
        )

    def parse_date(self, date_str: str) -> Optional[datetime]:
        return self.transformer.parse_iso_date(date_str)

    def resolve_amount(self, fields: List[str],
                       layout: ColumnLayout) -> Optional[Tuple[Decimal, TransactionType]]:
        amount = self.transformer.parse_french_number(layout.value(fields, 'amount'))
        return self.sign_detector.from_signed_amount(amount)

    def describe(self, fields: List[str], layout: ColumnLayout) -> str:
        """Short part of "Court | Long" labels"""
        label = layout.value(fields, 'description')
        short, _, _ = label.partition(' | ')
        return short.strip()

    def category_of(self, fields: List[str], layout: ColumnLayout) -> Optional[str]:
        category = layout.value(fields, 'category')
        parent = layout.value(fields, 'categoryParent')

        if parent and category:
            return f"{parent} > {category}"
        return category or parent or None

    def raw_cells(self, fields: List[str], layout: ColumnLayout) -> Dict[str, str]:
        cells = {'amount_raw': layout.value(fields, 'amount')}
        for column in ('dateVal', 'comment', 'accountbalance'):
            if layout.has(column):
                cells[column] = layout.value(fields, column)
        return cells
