"""Product store that picks Cosmos DB or the local JSON file once per instance."""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from product_catalog.config import CosmosSettings
from product_catalog.errors import ConfigurationError, ConnectivityError
from product_catalog.json_store import JsonFileProductBackend

logger = logging.getLogger(__name__)


def _load_cosmos_module():
    """Import the Cosmos backend, or return None when the Azure SDK is missing."""
    try:
        from product_catalog import cosmos_store
    except ImportError as e:
        logger.warning(
            "Azure Cosmos SDK not available (%s); using the local JSON file. "
            "Install it with: pip install azure-cosmos azure-identity", e,
        )
        return None
    return cosmos_store


class ProductStore:
    """Uniform read-all / replace-all access to the catalog.

    The first call to ``initialize`` (made implicitly by every operation)
    decides which backend is authoritative for the lifetime of this object.
    Cosmos DB is used when the SDK imports, credentials are configured and the
    container can be reached; in every other case the local JSON file is used
    and the remote backend is never retried.
    """

    def __init__(self, cosmos_settings: CosmosSettings, products_file: Path):
        self.cosmos_settings = cosmos_settings
        self.local_backend = JsonFileProductBackend(products_file)
        self._backend = self.local_backend
        self._initialized = False
        self._init_lock = threading.Lock()

    def initialize(self) -> None:
        if self._initialized:
            return
        # concurrent callers block until the backend is chosen
        with self._init_lock:
            if self._initialized:
                return
            self._backend = self._select_backend()
            self._initialized = True

    def _select_backend(self):
        cosmos_store = _load_cosmos_module()
        if cosmos_store is None:
            return self.local_backend

        settings = self.cosmos_settings
        if not settings.is_configured:
            logger.warning(
                "Cosmos DB credentials not configured; using local file %s",
                self.local_backend.file_path,
            )
            return self.local_backend

        try:
            container = cosmos_store.connect(settings)
        except (ConfigurationError, ConnectivityError) as e:
            logger.error("Cosmos DB init failed, falling back to JSON file: %s", e)
            return self.local_backend

        logger.info("Successfully connected to Cosmos DB at %s", settings.endpoint)
        return cosmos_store.CosmosProductBackend(container, settings)

    def is_remote_enabled(self) -> bool:
        return self._backend.remote

    def get_backend_info(self) -> Optional[Dict[str, str]]:
        if not self._backend.remote:
            return None
        return self._backend.backend_info()

    def read_all(self) -> List[Dict[str, Any]]:
        self.initialize()
        return self._backend.read_all()

    def replace_all(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.initialize()
        return self._backend.replace_all(products)
