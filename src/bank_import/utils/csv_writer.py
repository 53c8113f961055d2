"""CSV export of parsed transactions."""

import logging
import os
from typing import Any, Dict, List

import pandas as pd

from ..models.core import ParseResult, ParsedTransaction


logger = logging.getLogger(__name__)


class CSVWriter:
    """Writes the transactions of a ``ParseResult`` in a flat CSV layout"""

    STANDARD_HEADERS = [
        'date',
        'description',
        'amount',
        'type',
        'bank_category',
        'reference',
        'row_index'
    ]

    def to_dataframe(self, result: ParseResult) -> pd.DataFrame:
        """Build a DataFrame with one row per transaction, empty for failed results"""
        rows = [self._transaction_to_dict(t) for t in (result.transactions or ())]
        return pd.DataFrame(rows, columns=self.STANDARD_HEADERS)

    def write_transactions(self, result: ParseResult, output_path: str) -> bool:
        """
        Write the transactions of ``result`` to ``output_path``

        Returns:
            True if a file was written, False if there was nothing to write
            or the file could not be created
        """
        if not result.success or not result.transactions:
            logger.warning(f"Nothing to write to {output_path}")
            return False

        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            self.to_dataframe(result).to_csv(output_path, index=False, encoding='utf-8')
            logger.info(f"Wrote {result.transaction_count} transactions to {output_path}")
            return True

        except OSError as e:
            logger.error(f"Could not write {output_path}: {e}")
            return False

    def _transaction_to_dict(self, transaction: ParsedTransaction) -> Dict[str, Any]:
        raw_data = transaction.raw_data or {}
        return {
            'date': transaction.date.strftime('%Y-%m-%d'),
            'description': transaction.description,
            # Keep the exact decimal text rather than a float
            'amount': str(transaction.amount),
            'type': transaction.type.value,
            'bank_category': transaction.bank_category or '',
            'reference': transaction.reference or '',
            'row_index': raw_data.get('row_index'),
        }

    def summary_rows(self, result: ParseResult) -> List[List[str]]:
        """Rows for tabular console display"""
        return [
            [row['date'], row['type'], row['amount'], row['description'], row['bank_category']]
            for row in (self._transaction_to_dict(t) for t in (result.transactions or ()))
        ]
