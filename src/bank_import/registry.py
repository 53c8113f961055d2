"""Registry of bank parsers and the import entry point.

Keys match the "template" field of a bank, and display names are accepted
as aliases. Unknown keys fall back to the generic parser, so a lookup never
fails.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from .models.core import ParseResult, ParserConfig
from .parsers.base import BankParser, Content
from .parsers.boursorama import BoursoramaParser
from .parsers.caisse_epargne import CaisseEpargneParser
from .parsers.credit_mutuel import CreditMutuelParser
from .parsers.generic import GenericCSVParser


logger = logging.getLogger(__name__)


class BankTemplate(NamedTuple):
    template: str
    label: str
    parser: str


# Banks with a dedicated parser; use the template as the bank's "template" field
BANK_TEMPLATES: Tuple[BankTemplate, ...] = (
    BankTemplate('credit_mutuel', 'Crédit Mutuel / CIC', 'Crédit Mutuel CSV'),
    BankTemplate('caisse_epargne', "Caisse d'Épargne", "Caisse d'Épargne CSV"),
    BankTemplate('boursorama', 'Boursorama Banque', 'Boursorama CSV'),
)

# alias -> bank key of the parser handling it
DEFAULT_ALIASES: Dict[str, str] = {
    'credit_mutuel': 'credit_mutuel',
    'Crédit Mutuel': 'credit_mutuel',
    'CIC': 'credit_mutuel',
    'caisse_epargne': 'caisse_epargne',
    # CE Pro uses the same format
    'caisse_epargne_entreprise': 'caisse_epargne',
    "Caisse d'Épargne": 'caisse_epargne',
    "Caisse d'Épargne Pro": 'caisse_epargne',
    'boursorama': 'boursorama',
    'Boursorama': 'boursorama',
    'Boursorama Banque': 'boursorama',
    'other': 'other',
}

PARSER_CLASSES = (CreditMutuelParser, CaisseEpargneParser, BoursoramaParser, GenericCSVParser)


class ParserRegistry:
    """Read-only mapping from bank keys to parser instances.

    The mapping is built once in the constructor and never modified, so one
    registry can serve concurrent imports.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()

        instances = {cls.bank_key: cls(self.config) for cls in PARSER_CLASSES}
        self._fallback = instances.get(self.config.default_bank_key, instances['other'])

        aliases = dict(DEFAULT_ALIASES)
        for alias, bank_key in (self.config.bank_aliases or {}).items():
            if bank_key in instances:
                aliases[alias] = bank_key
            else:
                logger.warning(f"Ignoring alias {alias!r}: unknown bank key {bank_key!r}")

        self._parsers: Mapping[str, BankParser] = MappingProxyType(
            {alias: instances[bank_key] for alias, bank_key in aliases.items()}
        )
        self._lowercase: Mapping[str, BankParser] = MappingProxyType(
            {alias.lower(): parser for alias, parser in reversed(list(self._parsers.items()))}
        )

    @property
    def parsers(self) -> Mapping[str, BankParser]:
        return self._parsers

    def get_parser(self, bank_key: str) -> BankParser:
        """Get a parser by bank key (template or name).

        Exact key first, then a case-insensitive match, then the generic
        parser.
        """
        parser = self._parsers.get(bank_key)
        if parser is not None:
            return parser

        parser = self._lowercase.get((bank_key or '').lower())
        if parser is not None:
            return parser

        logger.info(f"No dedicated parser for {bank_key!r}, using {self._fallback.name}")
        return self._fallback

    def get_all_parsers(self) -> List[BankParser]:
        """Distinct parser instances, in registration order"""
        unique: List[BankParser] = []
        for parser in self._parsers.values():
            if parser not in unique:
                unique.append(parser)
        return unique

    def get_parser_info(self, bank_key: str) -> Optional[Dict[str, object]]:
        """Name and MIME types of the parser registered under exactly ``bank_key``"""
        parser = self._parsers.get(bank_key)
        if parser is None:
            return None
        return {
            'name': parser.name,
            'supported_mime_types': list(parser.supported_mime_types),
        }

    def bank_keys(self) -> List[str]:
        return list(self._parsers.keys())

    async def parse_import(self, bank_key: str, content: Content,
                           mime_type: str = 'text/csv') -> ParseResult:
        """Parse ``content`` with the parser selected by ``bank_key``"""
        parser = self.get_parser(bank_key)
        logger.info(f"Importing with {parser.name} parser (bank key {bank_key!r})")
        return await parser.parse_async(content, mime_type)


_default_registry = ParserRegistry()


def get_parser(bank_key: str) -> BankParser:
    return _default_registry.get_parser(bank_key)


def get_all_parsers() -> List[BankParser]:
    return _default_registry.get_all_parsers()


def get_parser_info(bank_key: str) -> Optional[Dict[str, object]]:
    return _default_registry.get_parser_info(bank_key)


async def parse_import(bank_key: str, content: Content,
                       mime_type: str = 'text/csv') -> ParseResult:
    """Single entry point used by the rest of the application"""
    return await _default_registry.parse_import(bank_key, content, mime_type)
