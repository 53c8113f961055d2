"""Error taxonomy, result aggregation and logging setup for bank imports.

Problems come in two tiers:

* file-level errors (empty file, missing column, bad encoding) abort the
  parse and produce ``success=False`` with no transactions;
* row-level warnings (invalid date, zero amount) drop one row and let the
  parse continue.
"""

import json
import logging
import sys
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any

from ..models.core import ParsedTransaction, ParseResult


logger = logging.getLogger(__name__)

NO_DATA_ROWS_MESSAGE = "File is empty or has no data rows"
NO_TRANSACTIONS_MESSAGE = "No valid transactions found in file"


class ErrorSeverity(Enum):
    """Error severity levels"""
    WARNING = "warning"
    ERROR = "error"


class ErrorCategory(Enum):
    """Error categories for classification"""
    FILE_FORMAT = "file_format"
    DATA_PARSING = "data_parsing"
    DATA_VALIDATION = "data_validation"
    SYSTEM = "system"


ERROR_CODES = {
    # File format errors
    "EMPTY_FILE": "F101",
    "MALFORMED_FILE": "F102",
    "MISSING_REQUIRED_COLUMNS": "F104",
    "ENCODING_ERROR": "F105",

    # Data parsing errors
    "DATE_PARSE_ERROR": "D001",
    "AMOUNT_PARSE_ERROR": "D002",

    # Data validation errors
    "ZERO_AMOUNT": "V003",
    "NO_TRANSACTIONS": "V006",

    # System errors
    "UNEXPECTED_ERROR": "S999"
}

_CATEGORY_BY_TYPE = {
    "EMPTY_FILE": ErrorCategory.FILE_FORMAT,
    "MALFORMED_FILE": ErrorCategory.FILE_FORMAT,
    "MISSING_REQUIRED_COLUMNS": ErrorCategory.FILE_FORMAT,
    "ENCODING_ERROR": ErrorCategory.FILE_FORMAT,
    "DATE_PARSE_ERROR": ErrorCategory.DATA_PARSING,
    "AMOUNT_PARSE_ERROR": ErrorCategory.DATA_PARSING,
    "ZERO_AMOUNT": ErrorCategory.DATA_VALIDATION,
    "NO_TRANSACTIONS": ErrorCategory.DATA_VALIDATION,
}


class ImportFileError(Exception):
    """File-level problem that makes the whole file untrusted"""

    error_type = "MALFORMED_FILE"


class EmptyFileError(ImportFileError):
    error_type = "EMPTY_FILE"

    def __init__(self, message: str = NO_DATA_ROWS_MESSAGE):
        super().__init__(message)


class MissingColumnError(ImportFileError):
    error_type = "MISSING_REQUIRED_COLUMNS"


class EncodingError(ImportFileError):
    error_type = "ENCODING_ERROR"


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    parser: Optional[str] = None
    row_number: Optional[int] = None
    raw_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class ImportErrorHandler:
    """Collects transactions and issues for a single parse call.

    One instance lives for exactly one ``parse`` invocation and is turned
    into an immutable ``ParseResult`` by ``build``.
    """

    def __init__(self, parser_name: str):
        self.parser_name = parser_name
        self.transactions: List[ParsedTransaction] = []
        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []

    def _detail(self, severity: ErrorSeverity, message: str, error_type: str,
                row_number: Optional[int], raw_value: Optional[str]) -> ErrorDetail:
        category = _CATEGORY_BY_TYPE.get(error_type, ErrorCategory.SYSTEM)
        return ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=severity.value,
            category=category.value,
            error_code=ERROR_CODES.get(error_type, "S999"),
            message=message,
            parser=self.parser_name,
            row_number=row_number,
            raw_value=raw_value
        )

    def add_transaction(self, transaction: ParsedTransaction) -> None:
        self.transactions.append(transaction)

    def log_row_warning(self,
                        row_number: int,
                        message: str,
                        warning_type: str,
                        raw_value: Optional[str] = None) -> ErrorDetail:
        """Record a recoverable per-row problem; the row is dropped"""
        detail = self._detail(
            ErrorSeverity.WARNING, f"Row {row_number}: {message}",
            warning_type, row_number, raw_value
        )
        self.warnings.append(detail)
        logger.warning(
            detail.message,
            extra={'error_code': detail.error_code, 'category': detail.category,
                   'parser': self.parser_name}
        )
        return detail

    def log_error(self, message: str, error_type: str) -> ErrorDetail:
        """Record a file-level error"""
        detail = self._detail(ErrorSeverity.ERROR, message, error_type, None, None)
        self.errors.append(detail)
        logger.error(
            f"{self.parser_name}: {message}",
            extra={'error_code': detail.error_code, 'category': detail.category,
                   'parser': self.parser_name}
        )
        return detail

    def fail(self, message: str, error_type: str = "MALFORMED_FILE") -> ParseResult:
        """Record a file-level error and return the failed result"""
        self.log_error(message, error_type)
        return ParseResult.failure(*[e.message for e in self.errors])

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def build(self, require_transactions: bool = False) -> ParseResult:
        """Assemble the final ``ParseResult``.

        Args:
            require_transactions: Treat a file where every row was dropped
                as a failure instead of an empty import
        """
        if self.errors:
            return ParseResult.failure(*[e.message for e in self.errors])

        if require_transactions and not self.transactions:
            return self.fail(NO_TRANSACTIONS_MESSAGE, "NO_TRANSACTIONS")

        logger.info(
            f"{self.parser_name}: parsed {len(self.transactions)} transactions "
            f"({len(self.warnings)} rows skipped)"
        )
        return ParseResult(
            success=True,
            transactions=tuple(self.transactions),
            warnings=tuple(w.message for w in self.warnings) or None
        )

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        warnings_by_category: Dict[str, int] = {}
        for warning in self.warnings:
            warnings_by_category[warning.category] = warnings_by_category.get(warning.category, 0) + 1

        return {
            'parser': self.parser_name,
            'total_transactions': len(self.transactions),
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'warnings_by_category': warnings_by_category,
            'skipped_rows': [w.row_number for w in self.warnings if w.row_number is not None]
        }


class JSONFormatter(logging.Formatter):
    """One JSON object per log record"""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for key in ('error_code', 'category', 'parser'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry)


def setup_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Configure root logging for command-line use"""
    root = logging.getLogger()
    for existing in [h for h in root.handlers if getattr(h, "_bank_import", False)]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler._bank_import = True
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
