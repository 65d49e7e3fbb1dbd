"""Local JSON file backend for the product catalog."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from product_catalog.errors import StorageError

logger = logging.getLogger(__name__)


class JsonFileProductBackend:
    """Stores the whole catalog as one pretty-printed JSON array on disk."""

    remote = False

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)

    def read_all(self) -> List[Dict[str, Any]]:
        """Load every product from the JSON file."""
        try:
            with open(self.file_path, 'r', encoding='utf-8') as file:
                products = json.load(file)
        except FileNotFoundError as e:
            logger.error("Products file not found: %s", self.file_path)
            raise StorageError(f"products file not found: {self.file_path}") from e
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading products file %s: %s", self.file_path, e)
            raise StorageError(f"could not read {self.file_path}") from e
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in products file %s: %s", self.file_path, e)
            raise StorageError(f"malformed JSON in {self.file_path}") from e

        if not isinstance(products, list):
            logger.error("Products file %s does not contain a JSON array", self.file_path)
            raise StorageError(f"expected a JSON array in {self.file_path}")

        return products

    def replace_all(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Overwrite the file with ``products``.

        The snapshot is written to a temporary file in the same directory and
        renamed over the target, so readers never see a half-written file.
        """
        directory = self.file_path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                'w',
                encoding='utf-8',
                dir=directory,
                prefix=f".{self.file_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(products, tmp, indent=2, ensure_ascii=False, allow_nan=False)
                tmp.write("\n")
            os.replace(tmp_name, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write products file %s: %s", self.file_path, e)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"could not write {self.file_path}") from e

        logger.info("Wrote %s products to %s", len(products), self.file_path)
        return products
