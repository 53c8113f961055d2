"""Tests for the TransactionSignDetector utility."""

from decimal import Decimal

from bank_import.models.core import TransactionType
from bank_import.utils.sign_detector import DebitConvention, TransactionSignDetector


class TestTransactionSignDetector:
    """Test cases for TransactionSignDetector"""

    def setup_method(self):
        self.absolute = TransactionSignDetector(DebitConvention.ABSOLUTE)
        self.signed = TransactionSignDetector(DebitConvention.SIGNED)

    def test_signed_amount_positive_is_income(self):
        assert self.absolute.from_signed_amount(Decimal('2500.00')) == (
            Decimal('2500.00'), TransactionType.INCOME
        )

    def test_signed_amount_negative_is_expense(self):
        amount, kind = self.absolute.from_signed_amount(Decimal('-42.10'))
        assert amount == Decimal('42.10')
        assert kind == TransactionType.EXPENSE

    def test_signed_amount_zero(self):
        assert self.absolute.from_signed_amount(Decimal('0')) is None
        assert self.absolute.from_signed_amount(Decimal('-0.00')) is None

    def test_credit_wins(self):
        assert self.absolute.from_debit_credit(Decimal('5'), Decimal('100')) == (
            Decimal('100'), TransactionType.INCOME
        )

    def test_absolute_debit_ignores_sign(self):
        for debit in (Decimal('-12.95'), Decimal('12.95')):
            assert self.absolute.from_debit_credit(debit, Decimal('0')) == (
                Decimal('12.95'), TransactionType.EXPENSE
            )

    def test_signed_debit_uses_sign(self):
        assert self.signed.from_debit_credit(Decimal('-12.95'), Decimal('0')) == (
            Decimal('12.95'), TransactionType.EXPENSE
        )
        # A positive value in the debit column reads as money in
        assert self.signed.from_debit_credit(Decimal('3.00'), Decimal('0')) == (
            Decimal('3.00'), TransactionType.INCOME
        )

    def test_both_empty(self):
        assert self.absolute.from_debit_credit(Decimal('0'), Decimal('0')) is None
        assert self.signed.from_debit_credit(Decimal('0'), Decimal('0')) is None

    def test_negative_credit_falls_through_to_debit(self):
        assert self.absolute.from_debit_credit(Decimal('0'), Decimal('-5')) is None

    def test_amount_is_never_negative(self):
        values = [Decimal(v) for v in ('-1', '1', '-0.01', '999999.99', '-1234.56')]
        for detector in (self.absolute, self.signed):
            for value in values:
                for resolved in (
                    detector.from_signed_amount(value),
                    detector.from_debit_credit(value, Decimal('0')),
                    detector.from_debit_credit(Decimal('0'), value),
                ):
                    if resolved is not None:
                        assert resolved[0] > 0
