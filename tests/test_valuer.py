import sys
import unittest
from unittest.mock import MagicMock, patch
from pathlib import Path

VALUER_SRC = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(VALUER_SRC))

from item_valuer.client import MarketplaceClient
from item_valuer.config import Config
from item_valuer.errors import IdentificationError, InputError, UpstreamFetchError
from item_valuer.models import (
    IdentifiedItem, ItemAttributes, PriceStats, RawIdentification, SearchResult,
)
from item_valuer.valuer import Valuer


def identified(queries):
    return IdentifiedItem(item="brass lamp", attributes=ItemAttributes(brand="Acme"),
                          search_queries=queries)


def search_result(query):
    stats = PriceStats(count=0, min=None, max=None, avg=None, median=None, currency='GBP')
    return SearchResult(query=query, country='GB', max_age_days=60, stats=stats, samples=[])


class TestValuer(unittest.TestCase):
    def setUp(self):
        self.identifier = MagicMock()
        self.marketplace = MagicMock()
        self.marketplace.search_queries.side_effect = lambda queries, **kw: search_result(queries[0])
        self.valuer = Valuer(identifier=self.identifier, marketplace=self.marketplace)

    def test_valuate_sequences_identify_then_search(self):
        self.identifier.identify.return_value = identified(["brass desk lamp", "lamp"])
        stages = []

        valuation = self.valuer.valuate(b"img", "image/jpeg", "hint", country="IE", max_age_days=30,
                                        on_progress=lambda stage, pct: stages.append((stage, pct)))

        self.identifier.identify.assert_called_once_with(b"img", "image/jpeg", "hint")
        self.marketplace.search_queries.assert_called_once_with(
            ["brass desk lamp", "lamp"], country="IE", max_age_days=30)
        self.assertEqual(valuation.comps.query, "brass desk lamp")
        self.assertEqual(stages, [('upload', 10), ('identify', 35), ('search', 65), ('done', 100)])

    def test_item_name_used_when_no_queries(self):
        self.identifier.identify.return_value = identified([])

        valuation = self.valuer.valuate(b"img", "image/jpeg")

        self.assertEqual(valuation.comps.query, "brass lamp")

    def test_raw_identification_stops_before_search(self):
        self.identifier.identify.return_value = RawIdentification(raw="no idea")
        stages = []

        with self.assertRaises(IdentificationError) as context:
            self.valuer.valuate(b"img", "image/jpeg", on_progress=lambda s, p: stages.append(s))

        self.assertEqual(str(context.exception), "Could not identify item")
        self.assertEqual(context.exception.body, "no idea")
        self.marketplace.search_queries.assert_not_called()
        self.assertEqual(stages, ['upload', 'identify'])

    def test_identification_failure_stops_pipeline(self):
        self.identifier.identify.side_effect = UpstreamFetchError("boom", status_code=500)
        stages = []

        with self.assertRaises(UpstreamFetchError):
            self.valuer.valuate(b"img", "image/jpeg", on_progress=lambda s, p: stages.append(s))

        self.marketplace.search_queries.assert_not_called()
        self.assertEqual(stages, ['upload', 'identify'])

    def test_to_dict(self):
        self.identifier.identify.return_value = identified(["lamp"])

        data = self.valuer.valuate(b"img", "image/jpeg").to_dict()

        self.assertEqual(data['identification']['item'], "brass lamp")
        self.assertEqual(data['comps']['query'], "lamp")
        self.assertEqual(data['comps']['stats']['count'], 0)


@patch('item_valuer.client.requests.get')
class TestValuerWithMarketplaceClient(unittest.TestCase):
    def setUp(self):
        config = Config()
        config.ebay_client_id = "test-client-id"
        config.ebay_client_secret = "test-secret"
        self.token_cache = MagicMock()
        self.token_cache.acquire.return_value = 'token-1'
        self.identifier = MagicMock()
        self.valuer = Valuer(
            identifier=self.identifier,
            marketplace=MarketplaceClient(token_cache=self.token_cache, config=config),
        )

    def test_blank_identification_rejected_by_search(self, mock_get):
        self.identifier.identify.return_value = IdentifiedItem(
            item="  ", attributes=ItemAttributes(), search_queries=[])

        with self.assertRaises(InputError) as context:
            self.valuer.valuate(b"img", "image/jpeg")

        self.assertEqual(str(context.exception), "No search_queries provided")
        mock_get.assert_not_called()
        self.token_cache.acquire.assert_not_called()

    def test_identified_item_searched(self, mock_get):
        self.identifier.identify.return_value = identified(["brass desk lamp"])
        response = MagicMock()
        response.status_code = 200
        response.ok = True
        response.json.return_value = {'itemSummaries': [{'title': 'Lamp', 'price': {'value': '30', 'currency': 'GBP'}}]}
        mock_get.return_value = response

        valuation = self.valuer.valuate(b"img", "image/jpeg", max_age_days=500)

        self.assertEqual(valuation.comps.query, "brass desk lamp")
        self.assertEqual(valuation.comps.max_age_days, 180)
        self.assertEqual(valuation.comps.stats.median, 30.0)
        mock_get.assert_called_once()


if __name__ == '__main__':
    unittest.main()
