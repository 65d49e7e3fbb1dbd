"""Write the local products file through the product store.

Uses the same backend selection as the server, so products land in Cosmos DB
when it is configured and reachable, and back in the JSON file otherwise.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from product_catalog.config import AppSettings
from product_catalog.errors import DataError
from product_catalog.store import ProductStore

load_dotenv()


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(message)s')
    settings = AppSettings.from_env()

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--data-file",
        type=Path,
        default=settings.products_file,
        help=f"products JSON file to seed from (default: {settings.products_file})",
    )
    args = parser.parse_args(argv)

    if not args.data_file.exists():
        print(f"❌ products file not found at {args.data_file}")
        return 1

    store = ProductStore(settings.cosmos, settings.products_file)
    try:
        with open(args.data_file, 'r', encoding='utf-8') as file:
            products = json.load(file)
        print(f"Seeding {len(products)} products...")
        written = store.replace_all(products)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError, DataError) as e:
        print(f"❌ Seeding failed: {e}")
        return 2

    print(f"✅ Seeded {len(written)} products.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
