"""
Item identification through the Gemini vision API

Sends the photo plus the user's hint to Gemini and pulls a JSON object out of
the free-form reply. Replies without a usable object come back as a
RawIdentification so callers always get a result.
"""
import base64
import json
import logging
import re
from typing import Optional

import requests

from .config import Config, ConfigurationError, get_config
from .errors import ParseError, UpstreamFetchError
from .models import IdentificationResult, IdentifiedItem, ItemAttributes, RawIdentification

logger = logging.getLogger(__name__)

PROMPT = """
You are an expert valuer. Identify the item in this photo and describe its type, brand, category, and condition.
If a description is provided, use it to refine accuracy.
Return a JSON object ONLY in this format:
{
  "item": "Item name",
  "attributes": {
    "brand": "string",
    "category": "string",
    "condition": "string"
  },
  "search_queries": ["query1", "query2"]
}"""

# First "{" through the last "}"
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def _extract_json(text: str) -> dict:
    match = _JSON_OBJECT.search(text or '')
    if not match:
        raise ParseError("No JSON object in model reply")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in model reply: {e}") from e
    if not isinstance(parsed, dict):
        raise ParseError("Model reply JSON is not an object")
    return parsed


def _as_str(value) -> str:
    return value if isinstance(value, str) else ''


def parse_identification(text: str) -> IdentificationResult:
    try:
        data = _extract_json(text)
    except ParseError as e:
        logger.warning(f"Falling back to raw identification text: {e}")
        return RawIdentification(raw=text)

    attributes = data.get('attributes') or {}
    if not isinstance(attributes, dict):
        attributes = {}
    queries = data.get('search_queries') or []
    if not isinstance(queries, list):
        queries = []

    return IdentifiedItem(
        item=_as_str(data.get('item')),
        attributes=ItemAttributes(
            brand=_as_str(attributes.get('brand')),
            category=_as_str(attributes.get('category')),
            condition=_as_str(attributes.get('condition')),
        ),
        search_queries=[q for q in queries if isinstance(q, str)],
    )


def _reply_text(data: dict) -> str:
    try:
        text = data['candidates'][0]['content']['parts'][0]['text']
    except (KeyError, IndexError, TypeError):
        text = None
    return text or json.dumps(data)


class IdentificationClient:
    def __init__(self, config: Optional[Config] = None, timeout: int = 60):
        self.config = config or get_config()
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.config.gemini_api_url}/models/{self.config.gemini_model}:generateContent"

    def build_request(self, image_bytes: bytes, mime_type: str, description: str = '') -> dict:
        encoded = base64.b64encode(image_bytes).decode()
        return {
            'contents': [
                {
                    'parts': [
                        {'inlineData': {'mimeType': mime_type, 'data': encoded}},
                        {'text': f"{PROMPT}\nUser description: {description or ''}"},
                    ],
                },
            ],
        }

    def identify(self, image_bytes: bytes, mime_type: str, description: str = '') -> IdentificationResult:
        if not self.config.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not set")

        headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': self.config.gemini_api_key,
        }
        body = self.build_request(image_bytes, mime_type, description)

        response = requests.post(self.endpoint, headers=headers, json=body, timeout=self.timeout)
        if not response.ok:
            logger.error(f"Gemini REST error: {response.status_code} {response.text}")
            raise UpstreamFetchError(
                f"Gemini API call failed ({response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )

        return parse_identification(_reply_text(response.json()))
