"""Transaction direction resolution for bank exports.

Banks encode the direction of a movement in different ways:

- a single signed amount column (negative = money out);
- separate debit/credit columns, where the debit cell is either written
  already negative (Crédit Mutuel) or as a magnitude whose sign must be
  discarded (Caisse d'Épargne).

Whatever the source, the output is a non-negative magnitude plus an
INCOME/EXPENSE type. A zero amount resolves to None so the caller can skip
the row.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from ..models.core import TransactionType


logger = logging.getLogger(__name__)

ZERO = Decimal('0')


class DebitConvention(Enum):
    """How a bank writes values in its debit column"""
    SIGNED = "signed"        # debits exported already negative, used as-is
    ABSOLUTE = "absolute"    # any sign in the debit column is ignored


class TransactionSignDetector:
    """Turns raw signed or columnar amounts into (magnitude, type) pairs."""

    def __init__(self, debit_convention: DebitConvention = DebitConvention.ABSOLUTE):
        self.debit_convention = debit_convention

    def from_signed_amount(self, amount: Decimal) -> Optional[Tuple[Decimal, TransactionType]]:
        """Resolve a single signed amount.

        Returns:
            (magnitude, type) or None when the amount is zero
        """
        if amount == ZERO:
            return None
        if amount > ZERO:
            return amount, TransactionType.INCOME
        return -amount, TransactionType.EXPENSE

    def from_debit_credit(self, debit: Decimal,
                          credit: Decimal) -> Optional[Tuple[Decimal, TransactionType]]:
        """Resolve separate debit and credit values.

        A positive credit always wins. Otherwise a non-zero debit is applied
        according to the bank's debit convention.

        Returns:
            (magnitude, type) or None when both values are empty/zero
        """
        if credit > ZERO:
            return credit, TransactionType.INCOME

        if debit == ZERO:
            return None

        if self.debit_convention is DebitConvention.SIGNED:
            return self.from_signed_amount(debit)

        return abs(debit), TransactionType.EXPENSE

