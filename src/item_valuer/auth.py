"""
eBay application token cache

Obtains bearer tokens through the OAuth client-credentials grant and reuses
them until they are within a minute of expiring. Each MarketplaceClient owns
one cache; nothing is kept at module level.

Usage:
    from item_valuer.auth import TokenCache

    cache = TokenCache(client_id, client_secret)
    token = cache.acquire()
"""
import base64
import logging
import threading
import time
from typing import Callable, Optional

import requests

from .config import Config, ConfigurationError, DEFAULT_SCOPE, get_config
from .errors import UpstreamAuthError
from .models import CachedToken

logger = logging.getLogger(__name__)

TOKEN_URL = "https://api.ebay.com/identity/v1/oauth2/token"
EXPIRY_MARGIN_SECONDS = 60


class TokenCache:
    """Single-slot cache of an eBay application token"""

    def __init__(self, client_id: str, client_secret: str, scope: str = DEFAULT_SCOPE,
                 token_url: str = TOKEN_URL, clock: Callable[[], float] = time.time,
                 timeout: int = 30):
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self.token_url = token_url
        self.timeout = timeout
        self._clock = clock
        self._cached: Optional[CachedToken] = None
        # Serialises check-and-refresh so concurrent callers share one exchange
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'TokenCache':
        config = config or get_config()
        return cls(config.ebay_client_id, config.ebay_client_secret,
                   scope=config.ebay_scope, token_url=config.ebay_token_url)

    @property
    def cached(self) -> Optional[CachedToken]:
        return self._cached

    def _is_fresh(self, now: float) -> bool:
        return self._cached is not None and now < self._cached.expires_at - EXPIRY_MARGIN_SECONDS

    def acquire(self) -> str:
        """Return a usable access token, exchanging credentials when needed"""
        with self._lock:
            now = self._clock()
            if self._is_fresh(now):
                logger.debug("Reusing cached eBay token")
                return self._cached.access_token

            token = self._exchange(now)
            self._cached = token
            return token.access_token

    def invalidate(self):
        """Forget the cached token; the next acquire() performs an exchange"""
        with self._lock:
            self._cached = None

    def _basic_auth_header(self) -> str:
        credentials = f"{self.client_id}:{self.client_secret}"
        return 'Basic ' + base64.b64encode(credentials.encode()).decode()

    def _exchange(self, now: float) -> CachedToken:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("Missing EBAY_CLIENT_ID / EBAY_CLIENT_SECRET")

        headers = {
            'Content-Type': 'application/x-www-form-urlencoded',
            'Authorization': self._basic_auth_header()
        }
        data = {
            'grant_type': 'client_credentials',
            'scope': self.scope
        }

        response = requests.post(self.token_url, headers=headers, data=data, timeout=self.timeout)
        if not response.ok:
            logger.error(f"eBay token fetch failed: {response.status_code} {response.text}")
            raise UpstreamAuthError(
                f"eBay token fetch failed: {response.status_code} {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        payload = response.json()
        expires_in = int(payload.get('expires_in', 0))
        logger.info(f"Obtained eBay application token (expires in {expires_in}s)")
        return CachedToken(access_token=payload['access_token'], expires_at=now + expires_in)
