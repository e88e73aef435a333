"""
Photo -> identification -> sold comps, in that order
"""
import logging
from typing import Callable, Optional

from .client import DEFAULT_AGE_DAYS, MarketplaceClient
from .errors import IdentificationError
from .identify import IdentificationClient
from .models import IdentifiedItem, Valuation

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]

STAGES = {
    'upload': 10,
    'identify': 35,
    'search': 65,
    'done': 100,
}


class Valuer:
    def __init__(self, identifier: Optional[IdentificationClient] = None,
                 marketplace: Optional[MarketplaceClient] = None):
        self.identifier = identifier or IdentificationClient()
        self.marketplace = marketplace or MarketplaceClient()

    def valuate(self, image_bytes: bytes, mime_type: str, description: str = '',
                country: Optional[str] = None, max_age_days=DEFAULT_AGE_DAYS,
                on_progress: Optional[ProgressCallback] = None) -> Valuation:
        def report(stage: str):
            logger.debug(f"Valuation stage: {stage}")
            if on_progress is not None:
                on_progress(stage, STAGES[stage])

        report('upload')
        report('identify')
        identification = self.identifier.identify(image_bytes, mime_type, description)
        if not isinstance(identification, IdentifiedItem):
            logger.error(f"Unparseable identification reply: {identification.raw!r}")
            raise IdentificationError("Could not identify item", body=identification.raw)

        queries = identification.search_queries or [identification.item]

        report('search')
        comps = self.marketplace.search_queries(queries, country=country, max_age_days=max_age_days)

        report('done')
        return Valuation(identification=identification, comps=comps)
