"""Reload the Cosmos DB container from the local products JSON file.

Every existing document is deleted first, then each product from the file is
upserted. Exit codes: 1 data file missing, 2 Cosmos not configured or SDK
unavailable, 3 migration failed.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from product_catalog.config import CosmosSettings
from product_catalog.errors import CatalogError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class CosmosDBProductMigrator:
    """Drains a Cosmos DB container and reloads it with a product list."""

    def __init__(self, settings: CosmosSettings, cosmos_store):
        self.settings = settings
        self.cosmos_store = cosmos_store
        self.container = None

    def connect(self):
        """Create the database and container if they don't exist."""
        print("Ensuring database & container exist...")
        self.container = self.cosmos_store.connect(self.settings)
        print(f"Container '{self.settings.container_name}' ready with partition key "
              f"on '{self.settings.partition_key_path}'")

    def drain_container(self) -> Dict[str, int]:
        """Delete every document in the container, skipping ones that fail."""
        pk_property = self.settings.partition_key_property
        stats = {'deleted': 0, 'failed': 0}
        items = list(self.container.query_items(
            query="SELECT * FROM c",
            enable_cross_partition_query=True
        ))
        print(f"Deleting {len(items)} existing items from container...")
        for item in items:
            item_id = item.get('id')
            pk = item.get(pk_property)
            try:
                self.container.delete_item(item=item_id, partition_key=pk)
                stats['deleted'] += 1
            except self.cosmos_store.AzureError as e:
                stats['failed'] += 1
                logger.warning("Failed to delete item id=%s pk=%s: %s", item_id, pk, e)
        return stats

    def load_products(self, products: List[Dict[str, Any]]) -> int:
        """Upsert products one by one, defaulting missing partition keys."""
        pk_property = self.settings.partition_key_property
        print(f"Upserting {len(products)} products...")
        for product in products:
            document = self.cosmos_store.ensure_partition_key(product, pk_property)
            self.container.upsert_item(document)
            print(f"✓ Upserted product: {product.get('title', 'Unknown')} (ID: {product.get('id', 'Unknown')})")
        return len(products)


def load_products_from_json(file_path: Path) -> List[Dict[str, Any]]:
    """Load products from the JSON file."""
    with open(file_path, 'r', encoding='utf-8') as file:
        products = json.load(file)
    print(f"Loaded {len(products)} products from {file_path}")
    return products


def _parse_args(argv):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--data-file",
        type=Path,
        default=Path("data/products.json"),
        help="products JSON file to load (default: data/products.json)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main function to migrate products into Cosmos DB."""
    logging.basicConfig(level=logging.INFO, format='%(levelname)s - %(message)s')
    args = _parse_args(argv)

    if not args.data_file.exists():
        print(f"❌ products file not found at {args.data_file}")
        return 1
    try:
        products = load_products_from_json(args.data_file)
    except json.JSONDecodeError as e:
        print(f"❌ Error parsing JSON: {e}")
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"❌ Error reading {args.data_file}: {e}")
        return 1

    try:
        from product_catalog import cosmos_store
    except ImportError:
        print("❌ azure-cosmos is required to run migration. Install with: pip install azure-cosmos azure-identity")
        return 2

    settings = CosmosSettings.from_env()
    if not settings.is_configured:
        print("❌ Cosmos DB is not configured: set COSMOS_ENDPOINT and COSMOS_KEY (or COSMOS_USE_EMULATOR=true)")
        return 2

    migrator = CosmosDBProductMigrator(settings, cosmos_store)
    try:
        migrator.connect()
        stats = migrator.drain_container()
        print(f"Deleted: {stats['deleted']}  Failed: {stats['failed']}")
        migrator.load_products(products)
    except (CatalogError, cosmos_store.AzureError) as e:
        print(f"❌ Migration failed: {e}")
        return 3

    print("\n✅ Migration complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
