"""
Value an item from a photo

Identifies the item with Gemini, then pulls recently sold eBay comparables
and prints a price summary.

Usage:
    python valuate_item.py photo.jpg --description "boxed, unused" --country GB
    python valuate_item.py --serve   # run the HTTP API on :8000
"""
import argparse
import json
import logging
import mimetypes
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from item_valuer.config import ConfigurationError  # noqa: E402
from item_valuer.errors import InputError, UpstreamError  # noqa: E402
from item_valuer.valuer import Valuer  # noqa: E402

STAGE_LABELS = {
    'upload': "📤 Reading image...",
    'identify': "🧠 Analyzing image with Gemini...",
    'search': "💰 Fetching prices from eBay...",
    'done': "✅ Complete!",
}


def print_progress(stage: str, percent: int):
    print(f"[{percent:3d}%] {STAGE_LABELS.get(stage, stage)}")


def _money(value, currency: str) -> str:
    return "n/a" if value is None else f"{value:.2f} {currency}"


def print_summary(valuation):
    ident = valuation.identification
    comps = valuation.comps
    stats = comps.stats

    print()
    print("=" * 80)
    print(f"Item:      {ident.item}")
    print(f"Brand:     {ident.attributes.brand or '-'}")
    print(f"Category:  {ident.attributes.category or '-'}")
    print(f"Condition: {ident.attributes.condition or '-'}")
    print("=" * 80)
    print(f"Query:     {comps.query!r} ({comps.country}, last {comps.max_age_days} days)")
    print(f"Sold comps: {stats.count}")
    print(f"  Median:  {_money(stats.median, stats.currency)}")
    print(f"  Average: {_money(stats.avg, stats.currency)}")
    print(f"  Range:   {_money(stats.min, stats.currency)} - {_money(stats.max, stats.currency)}")

    if comps.samples:
        print()
        print("Recent sales:")
        for sample in comps.samples:
            price = _money(sample.price, sample.currency or stats.currency)
            print(f"  - {price:>14}  {sample.title}")


def serve(host: str, port: int):
    import uvicorn
    uvicorn.run("item_valuer.app:app", host=host, port=port)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Estimate an item's market value from a photo")
    parser.add_argument('image', nargs='?', help="Path to the item photo")
    parser.add_argument('--description', default='', help="Optional free-text hint")
    parser.add_argument('--country', default=None, help="Buyer country (default: EBAY_DEFAULT_COUNTRY)")
    parser.add_argument('--max-age-days', type=int, default=60, help="Sold within the last N days (1-180)")
    parser.add_argument('--json', action='store_true', help="Print the raw JSON result")
    parser.add_argument('--serve', action='store_true', help="Run the HTTP API instead")
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args(argv)
    if not args.serve and not args.image:
        parser.error("an image path is required unless --serve is given")
    return args


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.serve:
        serve(args.host, args.port)
        return 0

    if not os.path.isfile(args.image):
        print(f"❌ Image not found: {args.image}")
        return 1

    with open(args.image, 'rb') as f:
        image_bytes = f.read()
    mime_type = mimetypes.guess_type(args.image)[0] or 'image/jpeg'

    try:
        valuation = Valuer().valuate(
            image_bytes,
            mime_type,
            description=args.description,
            country=args.country,
            max_age_days=args.max_age_days,
            on_progress=None if args.json else print_progress,
        )
    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}")
        print()
        print("Make sure your .env file has:")
        print("  EBAY_CLIENT_ID=your_client_id")
        print("  EBAY_CLIENT_SECRET=your_client_secret")
        print("  GEMINI_API_KEY=your_gemini_key")
        return 1
    except InputError as e:
        print(f"❌ Could not value item: {e}")
        return 1
    except UpstreamError as e:
        print(f"❌ {e}")
        if e.body:
            print(f"Response: {e.body}")
        return 1
    except KeyboardInterrupt:
        print("\n\nCancelled by user")
        return 1

    if args.json:
        print(json.dumps(valuation.to_dict(), indent=2))
    else:
        print_summary(valuation)
    return 0


if __name__ == "__main__":
    sys.exit(main())
