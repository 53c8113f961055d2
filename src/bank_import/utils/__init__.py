"""Utility functions and helpers"""

from .encoding import decode_csv_buffer, is_valid_utf8
from .csv_tokenizer import detect_delimiter, normalize_header, split_fields, split_lines
from .sign_detector import DebitConvention, TransactionSignDetector
from .error_handler import (
    ImportErrorHandler, ImportFileError, EmptyFileError, MissingColumnError, EncodingError,
    ErrorCategory, ErrorSeverity, setup_logging
)
from .config_manager import ConfigManager
from .csv_writer import CSVWriter

__all__ = [
    'decode_csv_buffer',
    'is_valid_utf8',
    'detect_delimiter',
    'normalize_header',
    'split_fields',
    'split_lines',
    'DebitConvention',
    'TransactionSignDetector',
    'ImportErrorHandler',
    'ImportFileError',
    'EmptyFileError',
    'MissingColumnError',
    'EncodingError',
    'ErrorCategory',
    'ErrorSeverity',
    'setup_logging',
    'ConfigManager',
    'CSVWriter'
]
