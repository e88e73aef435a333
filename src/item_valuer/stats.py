"""
Price statistics over sold comparables
"""
from typing import Iterable, List, Optional, Sequence

from .models import ListingRecord, PriceStats

# eBay reports USD for many cross-border listings; treat it as "no preference"
EXCLUDED_CURRENCY = 'USD'
FALLBACK_CURRENCY = 'GBP'


def median(values: Iterable[float]) -> Optional[float]:
    ordered = sorted(values)
    if not ordered:
        return None
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def _pick_currency(listings: Sequence[ListingRecord]) -> str:
    first = listings[0].currency if listings else None
    if first and first != EXCLUDED_CURRENCY:
        return first
    return FALLBACK_CURRENCY


def aggregate(listings: Sequence[ListingRecord]) -> PriceStats:
    """Summarise the listings that carry a numeric price.

    The currency comes from the first listing overall, priced or not.
    """
    prices: List[float] = [listing.price for listing in listings
                          if isinstance(listing.price, (int, float))]
    if not prices:
        return PriceStats(count=0, min=None, max=None, avg=None, median=None,
                          currency=_pick_currency(listings))

    return PriceStats(
        count=len(prices),
        min=min(prices),
        max=max(prices),
        avg=round(sum(prices) / len(prices), 2),
        median=median(prices),
        currency=_pick_currency(listings),
    )
