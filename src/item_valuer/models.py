"""
Data models for listings, price stats and item identification
"""
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Union


@dataclass(frozen=True)
class CachedToken:
    """Bearer token issued by the client-credentials grant"""
    access_token: str
    expires_at: float  # epoch seconds


@dataclass(frozen=True)
class ListingRecord:
    """One sold comparable, normalised from an eBay item summary"""
    title: str
    price: Optional[float]  # None when eBay gave no usable price
    currency: Optional[str]
    condition: Optional[str]
    url: Optional[str]
    image: Optional[str]
    end_time: Optional[str]
    buying_options: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'title': self.title,
            'price': self.price,
            'currency': self.currency,
            'condition': self.condition,
            'url': self.url,
            'image': self.image,
            'endTime': self.end_time,
            'buyingOptions': list(self.buying_options),
        }


@dataclass(frozen=True)
class PriceStats:
    count: int
    min: Optional[float]
    max: Optional[float]
    avg: Optional[float]  # rounded to 2 decimals
    median: Optional[float]
    currency: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SearchResult:
    """Price summary plus a handful of sample comps for one query"""
    query: str
    country: str
    max_age_days: int
    stats: PriceStats
    samples: List[ListingRecord]

    def to_dict(self) -> dict:
        return {
            'query': self.query,
            'country': self.country,
            'maxAgeDays': self.max_age_days,
            'stats': self.stats.to_dict(),
            'samples': [s.to_dict() for s in self.samples],
        }


@dataclass(frozen=True)
class ItemAttributes:
    brand: str = ''
    category: str = ''
    condition: str = ''


@dataclass(frozen=True)
class IdentifiedItem:
    """Structured answer parsed out of the vision model's reply"""
    item: str
    attributes: ItemAttributes
    search_queries: List[str]
    kind: str = field(default='identified', init=False)

    def to_dict(self) -> dict:
        return {
            'item': self.item,
            'attributes': asdict(self.attributes),
            'search_queries': list(self.search_queries),
        }


@dataclass(frozen=True)
class RawIdentification:
    """Reply text that held no parseable JSON object"""
    raw: str
    kind: str = field(default='raw', init=False)

    def to_dict(self) -> dict:
        return {'raw': self.raw}


IdentificationResult = Union[IdentifiedItem, RawIdentification]


@dataclass(frozen=True)
class Valuation:
    identification: IdentifiedItem
    comps: SearchResult

    def to_dict(self) -> dict:
        return {
            'identification': self.identification.to_dict(),
            'comps': self.comps.to_dict(),
        }
