"""Caisse d'Épargne CSV parser.

Handles both the standard export ("Date de comptabilisation;Libelle
simplifie;...;Categorie;...;Debit;Credit;...") and the Pro/Entreprise export
("Date comptable;Libelle simplifie;Reference;...;Debit;Credit;...").
Files are semicolon separated, Windows-1252 for older exports, with French
numbers where credits look like "+100,00" and debits like "-12,95".
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .base import BankParser, find_exact
from ..models.core import ColumnLayout, ParserConfig, TransactionType
from ..utils.error_handler import MissingColumnError
from ..utils.sign_detector import DebitConvention, TransactionSignDetector


class CaisseEpargneParser(BankParser):
    """Parser for Caisse d'Épargne (particulier and Pro) CSV exports"""

    bank_key = 'caisse_epargne'
    name = "Caisse d'Épargne"
    supported_mime_types = ['text/csv', 'application/vnd.ms-excel']
    legacy_encoding = 'windows-1252'
    delimiter = ';'

    # Pro exports use "Date comptable", standard ones "Date de comptabilisation"
    DATE_COLUMNS = ['date comptable', 'date de comptabilisation', 'date', 'date operation']
    DESCRIPTION_COLUMNS = ['libelle simplifie']
    CATEGORY_COLUMNS = ['categorie']
    DEBIT_COLUMNS = ['debit']
    CREDIT_COLUMNS = ['credit']
    REFERENCE_COLUMNS = ['reference']

    def __init__(self, config: Optional[ParserConfig] = None):
        super().__init__(config)
        self.sign_detector = TransactionSignDetector(DebitConvention.ABSOLUTE)

    def resolve_columns(self, headers: List[str]) -> ColumnLayout:
        layout = ColumnLayout(
            date=find_exact(headers, self.DATE_COLUMNS),
            description=find_exact(headers, self.DESCRIPTION_COLUMNS),
            category=find_exact(headers, self.CATEGORY_COLUMNS),
            debit=find_exact(headers, self.DEBIT_COLUMNS),
            credit=find_exact(headers, self.CREDIT_COLUMNS),
            reference=find_exact(headers, self.REFERENCE_COLUMNS),
        )

        if layout.date is None:
            raise MissingColumnError(
                'Could not find "Date comptable" or "Date de comptabilisation" column in CSV'
            )
        if layout.description is None:
            raise MissingColumnError('Could not find "Libelle simplifie" column in CSV')
        if layout.debit is None or layout.credit is None:
            raise MissingColumnError('Could not find "Debit" and "Credit" columns in CSV')

        return layout

    def parse_date(self, date_str: str) -> Optional[datetime]:
        return self.transformer.parse_french_date(date_str)

    def resolve_amount(self, fields: List[str],
                       layout: ColumnLayout) -> Optional[Tuple[Decimal, TransactionType]]:
        debit = self.transformer.parse_french_number(layout.value(fields, 'debit'))
        credit = self.transformer.parse_french_number(layout.value(fields, 'credit'))
        return self.sign_detector.from_debit_credit(debit, credit)

    def raw_cells(self, fields: List[str], layout: ColumnLayout) -> Dict[str, str]:
        return {
            'debit_raw': layout.value(fields, 'debit'),
            'credit_raw': layout.value(fields, 'credit'),
        }
