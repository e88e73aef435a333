"""
Item Valuer Package
"""
from .auth import TokenCache
from .client import MarketplaceClient
from .config import Config, ConfigurationError, get_config
from .identify import IdentificationClient, parse_identification
from .models import (
    IdentifiedItem,
    ListingRecord,
    PriceStats,
    RawIdentification,
    SearchResult,
    Valuation,
)
from .stats import aggregate, median
from .valuer import Valuer

__all__ = [
    'TokenCache', 'MarketplaceClient', 'IdentificationClient', 'Valuer',
    'Config', 'ConfigurationError', 'get_config', 'parse_identification',
    'IdentifiedItem', 'RawIdentification', 'ListingRecord', 'PriceStats',
    'SearchResult', 'Valuation', 'aggregate', 'median',
]
