"""Configuration management for the bank import pipeline."""

import codecs
import json
import os
import yaml
from typing import Dict, Any, Optional
import logging

from ..models.core import ParserConfig


logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages loading and validation of parser configuration"""

    SEARCH_PATHS = [
        'bank_import.json',
        'bank_import.yml',
        'bank_import.yaml',
        'config/bank_import.json',
        'config/bank_import.yml',
        'config/bank_import.yaml',
        '~/.bank_import/config.json',
        '~/.bank_import/config.yml',
        '~/.bank_import/config.yaml',
    ]

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[ParserConfig] = None

    def load_config(self, force_reload: bool = False) -> ParserConfig:
        """Load parser configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            ParserConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()

        try:
            self._config_cache = ParserConfig(
                fallback_encoding=config_data.get('fallback_encoding', 'windows-1252'),
                utf8_scan_limit=config_data.get('utf8_scan_limit', 4096),
                default_bank_key=config_data.get('default_bank_key', 'other'),
                delimiters=config_data.get('delimiters'),
                bank_aliases=config_data.get('bank_aliases'),
                column_keywords=config_data.get('column_keywords'),
                date_formats=config_data.get('date_formats'),
            )
            logger.info(f"Configuration loaded successfully from {self.config_path or 'defaults'}")
            return self._config_cache

        except Exception as e:
            logger.warning(f"Error loading configuration: {e}. Using defaults.")
            self._config_cache = ParserConfig()
            return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration data, or an empty dict when no usable file exists"""
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.info("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        if self.config_path:
            return self.config_path

        for path in self.SEARCH_PATHS:
            path = os.path.expanduser(path)
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Args:
            data: Configuration data to validate

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        for str_key in ['fallback_encoding', 'default_bank_key']:
            if str_key in data:
                if not isinstance(data[str_key], str):
                    raise ValueError(f"{str_key} must be a string")
                if not data[str_key].strip():
                    raise ValueError(f"{str_key} cannot be empty")

        if 'fallback_encoding' in data:
            try:
                codecs.lookup(data['fallback_encoding'])
            except LookupError:
                raise ValueError(f"Unknown encoding: {data['fallback_encoding']}")

        if 'utf8_scan_limit' in data:
            limit = data['utf8_scan_limit']
            # bool is a subclass of int
            if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
                raise ValueError("utf8_scan_limit must be a positive integer")

        if 'delimiters' in data:
            if not isinstance(data['delimiters'], list) or not data['delimiters']:
                raise ValueError("delimiters must be a non-empty list")
            for delimiter in data['delimiters']:
                if not isinstance(delimiter, str) or len(delimiter) != 1:
                    raise ValueError("All delimiters must be single characters")

        if 'date_formats' in data:
            if not isinstance(data['date_formats'], list):
                raise ValueError("date_formats must be a list")
            for fmt in data['date_formats']:
                if not isinstance(fmt, str):
                    raise ValueError("All date formats must be strings")

        if 'bank_aliases' in data:
            if not isinstance(data['bank_aliases'], dict):
                raise ValueError("bank_aliases must be a dictionary")
            for alias, bank_key in data['bank_aliases'].items():
                if not isinstance(bank_key, str):
                    raise ValueError(f"Bank key for alias {alias} must be a string")

        if 'column_keywords' in data:
            if not isinstance(data['column_keywords'], dict):
                raise ValueError("column_keywords must be a dictionary")
            for role, keywords in data['column_keywords'].items():
                if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
                    raise ValueError(f"column_keywords for {role} must be a list of strings")

    def save_config_template(self, output_path: str) -> None:
        """Generate and save a configuration file template

        Args:
            output_path: Path where to save the template
        """
        template = {
            "fallback_encoding": "windows-1252",
            "utf8_scan_limit": 4096,
            "default_bank_key": "other",
            "delimiters": [",", ";", "\t", "|"],
            "bank_aliases": {
                "Banque Populaire": "other",
                "LCL": "other",
                "Crédit Mutuel Arkéa": "credit_mutuel"
            },
            "column_keywords": {
                "date": ["date", "datum", "fecha"],
                "description": ["description", "libellé", "libelle", "label", "memo"],
                "amount": ["amount", "montant"]
            },
            "date_formats": [
                "%d/%m/%Y",
                "%Y-%m-%d",
                "%d-%m-%Y",
                "%d.%m.%Y",
                "%d/%m/%y",
                "%Y-%m-%d %H:%M:%S"
            ]
        }

        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                if output_path.endswith(('.yml', '.yaml')):
                    yaml.dump(template, f, default_flow_style=False, indent=2, allow_unicode=True)
                else:
                    # Default to JSON
                    json.dump(template, f, indent=2, ensure_ascii=False)

            logger.info(f"Configuration template saved to {output_path}")

        except Exception as e:
            logger.error(f"Error saving configuration template: {e}")
            raise

