"""
eBay Browse API client for sold comparables
"""
import math
import requests
import logging
from typing import Iterable, List, Optional

from .auth import TokenCache
from .config import Config, get_config
from .errors import InputError, UpstreamFetchError
from .models import ListingRecord, SearchResult
from .stats import aggregate

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
SAMPLE_SIZE = 8
MIN_AGE_DAYS = 1
MAX_AGE_DAYS = 180
DEFAULT_AGE_DAYS = 60


def clamp_age_days(max_age_days) -> int:
    """Clamp to [1, 180]; infinities land on the bounds, NaN is rejected"""
    value = float(max_age_days)
    if math.isnan(value):
        raise InputError("maxAgeDays must be a number")
    return int(min(max(value, MIN_AGE_DAYS), MAX_AGE_DAYS))


def build_filter(country: str, max_age_days: int) -> str:
    """Sold items that ended inside the window, priced for delivery to `country`"""
    clauses = [
        'soldItemsOnly:true',
        f'itemEndDate:[NOW-{max_age_days}d..NOW]',
        f'deliveryCountry:{country}',
    ]
    return ','.join(clauses)


def _parse_price(value) -> Optional[float]:
    if value in (None, ''):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def to_listing(summary: dict) -> ListingRecord:
    price_info = summary.get('price') or {}
    image = summary.get('image') or {}
    return ListingRecord(
        title=summary.get('title', ''),
        price=_parse_price(price_info.get('value')),
        currency=price_info.get('currency'),
        condition=summary.get('condition'),
        url=summary.get('itemWebUrl') or summary.get('itemHref'),
        image=image.get('imageUrl'),
        end_time=summary.get('itemEndDate'),
        buying_options=list(summary.get('buyingOptions') or []),
    )


class MarketplaceClient:
    def __init__(self, token_cache: Optional[TokenCache] = None, config: Optional[Config] = None,
                 timeout: int = 30):
        self.config = config or get_config()
        self.token_cache = token_cache or TokenCache.from_config(self.config)
        self.base_url = self.config.ebay_browse_api_url
        self.timeout = timeout

    def _headers(self, token: str) -> dict:
        return {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json'
        }

    def _get(self, url: str, params: dict) -> requests.Response:
        token = self.token_cache.acquire()
        return requests.get(url, headers=self._headers(token), params=params, timeout=self.timeout)

    def search(self, query: str, country: Optional[str] = None,
               max_age_days=DEFAULT_AGE_DAYS) -> SearchResult:
        country = country or self.config.default_country
        max_age_days = clamp_age_days(max_age_days)

        url = f"{self.base_url}/item_summary/search"
        params = {
            'q': query,
            'limit': str(SEARCH_LIMIT),
            'filter': build_filter(country, max_age_days),
        }

        response = self._get(url, params)

        # Token may have been revoked or expired mid-flight: one fresh token, one retry
        if response.status_code == 401:
            logger.info("eBay search returned 401, retrying with a fresh token")
            self.token_cache.invalidate()
            response = self._get(url, params)

        if not response.ok:
            logger.error(f"eBay API error: {response.status_code} {response.text}")
            raise UpstreamFetchError(
                f"Failed to fetch eBay data ({response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )

        data = response.json()
        listings = [to_listing(it) for it in data.get('itemSummaries') or []]
        logger.debug(f"eBay returned {len(listings)} listings for {query!r}")

        return SearchResult(
            query=query,
            country=country,
            max_age_days=max_age_days,
            stats=aggregate(listings),
            samples=listings[:SAMPLE_SIZE],
        )

    def search_queries(self, queries: Iterable[str], country: Optional[str] = None,
                       max_age_days=DEFAULT_AGE_DAYS) -> SearchResult:
        """Search the first usable suggestion; the rest are ignored for now"""
        usable: List[str] = [q.strip() for q in queries if isinstance(q, str) and q.strip()]
        if not usable:
            raise InputError("No search_queries provided")
        return self.search(usable[0], country=country, max_age_days=max_age_days)
