"""Bank statement parsers, one per supported export format"""

from .base import BankParser, DataTransformer
from .caisse_epargne import CaisseEpargneParser
from .credit_mutuel import CreditMutuelParser
from .boursorama import BoursoramaParser
from .generic import GenericCSVParser

__all__ = [
    'BankParser',
    'DataTransformer',
    'CaisseEpargneParser',
    'CreditMutuelParser',
    'BoursoramaParser',
    'GenericCSVParser',
]
