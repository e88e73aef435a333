import sys
import unittest
from pathlib import Path

VALUER_SRC = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(VALUER_SRC))

from item_valuer.models import ListingRecord
from item_valuer.stats import aggregate, median


def listing(price, currency='GBP'):
    return ListingRecord(title='x', price=price, currency=currency, condition=None,
                         url=None, image=None, end_time=None)


class TestMedian(unittest.TestCase):
    def test_empty(self):
        self.assertIsNone(median([]))

    def test_single(self):
        self.assertEqual(median([5]), 5)

    def test_even_length_averages_middle_pair(self):
        self.assertEqual(median([1, 3]), 2)

    def test_odd_length(self):
        self.assertEqual(median([1, 2, 3]), 2)

    def test_unsorted_input(self):
        self.assertEqual(median([9, 1, 5, 3]), 4)


class TestAggregate(unittest.TestCase):
    def test_basic_stats(self):
        stats = aggregate([listing(p) for p in (10, 20, 30, 40)])

        self.assertEqual(stats.count, 4)
        self.assertEqual(stats.min, 10)
        self.assertEqual(stats.max, 40)
        self.assertEqual(stats.avg, 25.00)
        self.assertEqual(stats.median, 25)
        self.assertEqual(stats.currency, 'GBP')

    def test_empty(self):
        stats = aggregate([])

        self.assertEqual(stats.count, 0)
        self.assertIsNone(stats.min)
        self.assertIsNone(stats.max)
        self.assertIsNone(stats.avg)
        self.assertIsNone(stats.median)
        self.assertEqual(stats.currency, 'GBP')

    def test_avg_rounded_to_two_decimals(self):
        stats = aggregate([listing(p) for p in (1.0, 1.0, 1.01)])

        self.assertEqual(stats.avg, 1.0)

    def test_unpriced_listings_ignored(self):
        stats = aggregate([listing(None), listing(15.5), listing(None)])

        self.assertEqual(stats.count, 1)
        self.assertEqual(stats.min, 15.5)
        self.assertEqual(stats.median, 15.5)

    def test_only_unpriced_listings(self):
        stats = aggregate([listing(None, currency='EUR')])

        self.assertEqual(stats.count, 0)
        self.assertIsNone(stats.avg)
        self.assertEqual(stats.currency, 'EUR')

    def test_currency_from_first_listing(self):
        stats = aggregate([listing(10, 'EUR'), listing(20, 'GBP')])

        self.assertEqual(stats.currency, 'EUR')

    def test_usd_falls_back(self):
        stats = aggregate([listing(10, 'USD'), listing(20, 'EUR')])

        self.assertEqual(stats.currency, 'GBP')

    def test_missing_currency_falls_back(self):
        stats = aggregate([listing(10, None)])

        self.assertEqual(stats.currency, 'GBP')


if __name__ == '__main__':
    unittest.main()
