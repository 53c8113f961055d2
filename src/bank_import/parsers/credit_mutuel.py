"""Crédit Mutuel / CIC CSV parser."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .base import BankParser, SkipRow, find_column
from ..models.core import ColumnLayout, ParserConfig, TransactionType
from ..utils.error_handler import MissingColumnError
from ..utils.sign_detector import DebitConvention, TransactionSignDetector


class CreditMutuelParser(BankParser):
    """Parser for Crédit Mutuel and CIC CSV exports.

    Headers vary between exports ("Date", "Date d'opération", "Libellé",
    "Débit", "Crédit", "Montant"), so columns are found by substring on the
    normalized header. The value date column is never used as the
    transaction date. Debits are exported already negative.
    """

    bank_key = 'credit_mutuel'
    name = 'Crédit Mutuel'
    supported_mime_types = ['text/csv']
    legacy_encoding = 'windows-1252'
    delimiter = ';'

    def __init__(self, config: Optional[ParserConfig] = None):
        super().__init__(config)
        self.sign_detector = TransactionSignDetector(DebitConvention.SIGNED)

    def resolve_columns(self, headers: List[str]) -> ColumnLayout:
        layout = ColumnLayout(
            date=find_column(headers, lambda h: 'date' in h and 'valeur' not in h),
            description=find_column(headers, lambda h: 'libelle' in h or 'description' in h),
            debit=find_column(headers, lambda h: 'debit' in h),
            credit=find_column(headers, lambda h: 'credit' in h),
            amount=find_column(headers, lambda h: 'montant' in h),
        )

        if layout.date is None:
            raise MissingColumnError('Could not find date column in CSV')
        if layout.description is None:
            raise MissingColumnError('Could not find description/libellé column in CSV')

        return layout

    def parse_date(self, date_str: str) -> Optional[datetime]:
        return self.transformer.parse_french_date(date_str)

    def resolve_amount(self, fields: List[str],
                       layout: ColumnLayout) -> Optional[Tuple[Decimal, TransactionType]]:
        if layout.debit is not None and layout.credit is not None:
            debit = self.transformer.parse_french_number(layout.value(fields, 'debit'))
            credit = self.transformer.parse_french_number(layout.value(fields, 'credit'))
            return self.sign_detector.from_debit_credit(debit, credit)

        if layout.amount is not None:
            amount = self.transformer.parse_french_number(layout.value(fields, 'amount'))
            return self.sign_detector.from_signed_amount(amount)

        raise SkipRow('Could not determine amount')

    def category_of(self, fields: List[str], layout: ColumnLayout) -> Optional[str]:
        return None

    def raw_cells(self, fields: List[str], layout: ColumnLayout) -> Dict[str, str]:
        if layout.debit is not None and layout.credit is not None:
            return {
                'debit_raw': layout.value(fields, 'debit'),
                'credit_raw': layout.value(fields, 'credit'),
            }
        if layout.amount is not None:
            return {'amount_raw': layout.value(fields, 'amount')}
        return {}
