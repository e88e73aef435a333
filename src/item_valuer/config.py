"""
Configuration settings for the item valuer
"""
import os
import logging
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "https://api.ebay.com/oauth/api_scope"
DEFAULT_COUNTRY = "GB"
DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


class Config:
    """eBay + Gemini configuration"""

    def __init__(self):
        # eBay application credentials (client-credentials grant)
        self.ebay_client_id = os.getenv('EBAY_CLIENT_ID', '')
        self.ebay_client_secret = os.getenv('EBAY_CLIENT_SECRET', '')
        self.ebay_scope = os.getenv('EBAY_SCOPE') or DEFAULT_SCOPE
        self.default_country = os.getenv('EBAY_DEFAULT_COUNTRY') or DEFAULT_COUNTRY

        # Vision / LLM service
        self.gemini_api_key = os.getenv('GEMINI_API_KEY', '')
        self.gemini_model = os.getenv('GEMINI_MODEL') or DEFAULT_GEMINI_MODEL

        # API Endpoints
        self.ebay_token_url = "https://api.ebay.com/identity/v1/oauth2/token"
        self.ebay_browse_api_url = "https://api.ebay.com/buy/browse/v1"
        self.gemini_api_url = "https://generativelanguage.googleapis.com/v1"

    def validate_ebay(self):
        """Validate the marketplace credentials"""
        if not self.ebay_client_id:
            raise ConfigurationError("EBAY_CLIENT_ID not set")
        if not self.ebay_client_secret:
            raise ConfigurationError("EBAY_CLIENT_SECRET not set")

    def validate_gemini(self):
        if not self.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not set")

    def validate(self):
        """Validate required configuration"""
        self.validate_ebay()
        self.validate_gemini()


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = Config()
    return _config
