"""Tests for result aggregation and logging helpers."""

import json
import logging
from datetime import datetime
from decimal import Decimal

from bank_import.models.core import ParsedTransaction, TransactionType
from bank_import.utils.error_handler import (
    ERROR_CODES, EmptyFileError, ImportErrorHandler, JSONFormatter, MissingColumnError
)


def make_transaction(description='TEST'):
    return ParsedTransaction(
        date=datetime(2024, 1, 15, 12, 0, 0),
        description=description,
        amount=Decimal('10.00'),
        type=TransactionType.EXPENSE
    )


class TestImportErrorHandler:
    """Test cases for ImportErrorHandler"""

    def setup_method(self):
        self.handler = ImportErrorHandler('Test Parser')

    def test_build_success(self):
        self.handler.add_transaction(make_transaction())
        result = self.handler.build()

        assert result.success
        assert result.transaction_count == 1
        assert result.errors is None
        assert result.warnings is None

    def test_row_warning_details(self):
        detail = self.handler.log_row_warning(7, 'Invalid date "x"', 'DATE_PARSE_ERROR', 'x')

        assert detail.message == 'Row 7: Invalid date "x"'
        assert detail.error_code == ERROR_CODES['DATE_PARSE_ERROR']
        assert detail.category == 'data_parsing'
        assert detail.severity == 'warning'
        assert detail.parser == 'Test Parser'
        assert detail.to_dict()['row_number'] == 7
        assert self.handler.has_warnings()

    def test_row_warning_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            self.handler.log_row_warning(3, 'Amount is zero, skipping', 'ZERO_AMOUNT')

        assert 'Row 3: Amount is zero, skipping' in caplog.text
        assert caplog.records[-1].error_code == 'V003'

    def test_warnings_kept_on_success(self):
        self.handler.add_transaction(make_transaction())
        self.handler.log_row_warning(2, 'Amount is zero, skipping', 'ZERO_AMOUNT')

        result = self.handler.build()
        assert result.success
        assert result.warnings == ('Row 2: Amount is zero, skipping',)

    def test_fail(self):
        result = self.handler.fail('Could not find date column in CSV', 'MISSING_REQUIRED_COLUMNS')

        assert not result.success
        assert result.transactions is None
        assert result.errors == ('Could not find date column in CSV',)
        assert self.handler.errors[0].error_code == 'F104'

    def test_errors_win_over_transactions(self):
        self.handler.add_transaction(make_transaction())
        self.handler.log_error('broken', 'MALFORMED_FILE')

        result = self.handler.build()
        assert not result.success
        assert result.transactions is None

    def test_require_transactions(self):
        assert self.handler.build().success
        assert self.handler.build().transactions == ()

        result = self.handler.build(require_transactions=True)
        assert not result.success
        assert result.errors == ('No valid transactions found in file',)

    def test_error_summary(self):
        self.handler.add_transaction(make_transaction())
        self.handler.log_row_warning(2, 'Invalid date ""', 'DATE_PARSE_ERROR')
        self.handler.log_row_warning(4, 'Amount is zero, skipping', 'ZERO_AMOUNT')
        self.handler.log_row_warning(5, 'Amount is zero, skipping', 'ZERO_AMOUNT')

        summary = self.handler.get_error_summary()
        assert summary['total_transactions'] == 1
        assert summary['total_warnings'] == 3
        assert summary['warnings_by_category'] == {'data_parsing': 1, 'data_validation': 2}
        assert summary['skipped_rows'] == [2, 4, 5]

    def test_unknown_error_type_is_system(self):
        detail = self.handler.log_error('odd', 'SOMETHING_NEW')
        assert detail.error_code == 'S999'
        assert detail.category == 'system'


class TestExceptions:
    def test_empty_file_default_message(self):
        error = EmptyFileError()
        assert str(error) == 'File is empty or has no data rows'
        assert error.error_type == 'EMPTY_FILE'

    def test_missing_column_type(self):
        assert MissingColumnError('x').error_type == 'MISSING_REQUIRED_COLUMNS'


class TestJSONFormatter:
    def test_format_includes_extra_fields(self):
        record = logging.LogRecord(
            'bank_import.test', logging.WARNING, __file__, 10, 'Row %d skipped', (2,), None
        )
        record.error_code = 'V003'

        entry = json.loads(JSONFormatter().format(record))
        assert entry['message'] == 'Row 2 skipped'
        assert entry['level'] == 'WARNING'
        assert entry['error_code'] == 'V003'
        assert 'parser' not in entry
