"""Tests for the generic CSV parser."""

from datetime import datetime
from decimal import Decimal

import pytest

from bank_import.models.core import ParserConfig, TransactionType
from bank_import.parsers.base import BankParser
from bank_import.parsers.generic import GenericCSVParser


class TestGenericCSVParser:
    """Test cases for the fallback parser"""

    def setup_method(self):
        self.parser = GenericCSVParser()

    def test_comma_separated_iso_dates(self):
        result = self.parser.parse("Date,Description,Amount\n2024-03-05,Salary,2500.00\n")

        assert result.success
        transaction = result.transactions[0]
        assert transaction.type == TransactionType.INCOME
        assert transaction.amount == Decimal('2500')
        assert transaction.date == datetime(2024, 3, 5, 12, 0, 0)
        assert transaction.description == 'Salary'

    @pytest.mark.parametrize('header,row', [
        ('Date;Libellé;Montant', '05/03/2024;Loyer;-750,00'),
        ('Date\tLabel\tAmount', '05/03/2024\tLoyer\t-750.00'),
        ('Date|Memo|Amount', '05/03/2024|Loyer|-750.00'),
    ])
    def test_detects_delimiter(self, header, row):
        result = self.parser.parse(f"{header}\n{row}\n")

        assert result.success
        assert result.transactions[0].description == 'Loyer'
        assert result.transactions[0].type == TransactionType.EXPENSE
        assert result.transactions[0].amount == Decimal('750.00')
        assert result.transactions[0].date == datetime(2024, 3, 5, 12, 0, 0)

    def test_month_first_when_day_first_impossible(self):
        result = self.parser.parse("Date,Description,Amount\n12/25/2024,Gift,-50.00\n")
        assert result.transactions[0].date == datetime(2024, 12, 25, 12, 0, 0)

    def test_ambiguous_slash_date_is_day_first(self):
        result = self.parser.parse("Date,Description,Amount\n03/04/2024,Gift,-50.00\n")
        assert result.transactions[0].date == datetime(2024, 4, 3, 12, 0, 0)

    def test_iso_datetime_keeps_time(self):
        assert self.parser.parse_date('2024-03-05T14:30:00') == datetime(2024, 3, 5, 14, 30, 0)
        assert self.parser.parse_date('2024-03-05 14:30') == datetime(2024, 3, 5, 14, 30, 0)

    def test_configured_formats(self):
        assert self.parser.parse_date('05.03.2024') == datetime(2024, 3, 5, 12, 0, 0)
        assert self.parser.parse_date('5 March 2024') == datetime(2024, 3, 5, 12, 0, 0)
        assert self.parser.parse_date('not a date') is None
        assert self.parser.parse_date('') is None

    @pytest.mark.parametrize('text,expected', [
        ('1,234.56', Decimal('1234.56')),
        ('1.234,56', Decimal('1234.56')),
        ('1 234,56', Decimal('1234.56')),
        ('-12,95', Decimal('-12.95')),
        ('+100.00', Decimal('100.00')),
        ('€ 12,50', Decimal('12.50')),
        ('$1,000.00', Decimal('1000.00')),
        ('42', Decimal('42')),
        ('12abc', Decimal('12')),
        ('abc', Decimal('0')),
        ('', Decimal('0')),
    ])
    def test_parse_number(self, text, expected):
        assert self.parser.parse_number(text) == expected

    def test_unparseable_amount_becomes_zero_and_is_skipped(self):
        result = self.parser.parse(
            "Date,Description,Amount\n2024-01-01,Broken,n/a\n2024-01-02,Fine,3.00\n"
        )

        assert result.success
        assert result.transaction_count == 1
        assert result.warnings == ('Row 2: Amount is zero, skipping',)

    def test_debit_credit_columns(self):
        content = (
            "Date,Description,Debit,Credit\n"
            "2024-01-02,Coffee,3.50,\n"
            "2024-01-03,Refund,,10.00\n"
            "2024-01-04,Fee,-1.20,\n"
        )
        result = self.parser.parse(content)

        assert [(t.type, t.amount) for t in result.transactions] == [
            (TransactionType.EXPENSE, Decimal('3.50')),
            (TransactionType.INCOME, Decimal('10.00')),
            (TransactionType.EXPENSE, Decimal('1.20')),
        ]

    def test_category_column(self):
        result = self.parser.parse("Date,Description,Amount,Category\n2024-01-02,Bus,-2.00,Transport\n")
        assert result.transactions[0].bank_category == 'Transport'

    def test_no_valid_rows_is_failure(self):
        result = self.parser.parse("Date,Description,Amount\nyesterday,Salary,2500.00\n")

        assert not result.success
        assert result.transactions is None
        assert result.errors == ('No valid transactions found in file',)

    def test_missing_date_column(self):
        result = self.parser.parse("Description,Amount\nSalary,2500.00\n")

        assert not result.success
        assert result.errors == ('Could not find date column. Expected columns: date, datum, fecha',)

    def test_missing_description_column(self):
        result = self.parser.parse("Date,Amount\n2024-01-01,2500.00\n")

        assert not result.success
        assert result.errors == (
            'Could not find description column. Expected: description, libellé, label, memo',
        )

    def test_missing_amount_column(self):
        result = self.parser.parse("Date,Description\n2024-01-01,Salary\n")

        assert not result.success
        assert result.errors == ('Could not find amount column(s). Expected: amount, montant, debit/credit',)

    def test_header_only(self):
        result = self.parser.parse("Date,Description,Amount\n")
        assert result.errors == ("File is empty or has no data rows",)

    def test_configured_column_keywords(self):
        parser = GenericCSVParser(ParserConfig(column_keywords={'description': ['beneficiaire']}))
        result = parser.parse("Date;Bénéficiaire;Montant\n01/01/2024;EDF;-30,00\n")

        assert result.success
        assert result.transactions[0].description == 'EDF'

    def test_configured_delimiters(self):
        parser = GenericCSVParser(ParserConfig(delimiters=[',']))
        result = parser.parse("Date;Description;Amount\n2024-01-01;X;1\n")

        assert not result.success

    def test_parse_async(self):
        import asyncio

        result = asyncio.run(self.parser.parse_async("Date,Description,Amount\n2024-03-05,Salary,2500.00\n"))
        assert result.success
        assert result.transaction_count == 1


class ExplodingParser(GenericCSVParser):
    def parse_date(self, date_str):
        raise RuntimeError('boom')


class TestBankParserContract:
    """Behaviour shared by all parsers"""

    def test_parse_never_raises(self):
        result = ExplodingParser().parse("Date,Description,Amount\n2024-03-05,Salary,2500.00\n")

        assert not result.success
        assert result.transactions is None
        assert result.errors == ('boom',)

    def test_bank_parser_is_abstract(self):
        with pytest.raises(TypeError):
            BankParser()

    def test_info(self):
        assert GenericCSVParser().info() == {
            'bank_key': 'other',
            'name': 'Generic CSV',
            'supported_mime_types': ['text/csv'],
        }
