"""Environment-driven settings for the catalog service."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Well-known credentials of the local Azure Cosmos DB emulator
EMULATOR_ENDPOINT = "https://localhost:8081/"
EMULATOR_KEY = (
    "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
)

DEFAULT_DATABASE = "products-db"
DEFAULT_CONTAINER = "products"
DEFAULT_PARTITION_KEY = "/category"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class CosmosSettings:
    """Connection details for the Cosmos DB container."""

    endpoint: Optional[str] = None
    key: Optional[str] = None
    database_name: str = DEFAULT_DATABASE
    container_name: str = DEFAULT_CONTAINER
    partition_key_path: str = DEFAULT_PARTITION_KEY

    # Service principal credentials
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    tenant_id: Optional[str] = None

    use_aad: bool = False
    use_emulator: bool = False

    @classmethod
    def from_env(cls) -> "CosmosSettings":
        use_emulator = _env_flag("COSMOS_USE_EMULATOR")
        endpoint = os.getenv("COSMOS_ENDPOINT")
        key = os.getenv("COSMOS_KEY")
        if use_emulator:
            endpoint = endpoint or EMULATOR_ENDPOINT
            key = key or EMULATOR_KEY

        return cls(
            endpoint=endpoint,
            key=key,
            database_name=os.getenv("COSMOS_DATABASE", DEFAULT_DATABASE),
            container_name=os.getenv("COSMOS_CONTAINER", DEFAULT_CONTAINER),
            partition_key_path=os.getenv("COSMOS_PARTITION_KEY", DEFAULT_PARTITION_KEY),
            client_id=os.getenv("AZURE_CLIENT_ID"),
            client_secret=os.getenv("AZURE_CLIENT_SECRET"),
            tenant_id=os.getenv("AZURE_TENANT_ID"),
            use_aad=_env_flag("COSMOS_USE_AAD"),
            use_emulator=use_emulator,
        )

    @property
    def partition_key_property(self) -> str:
        """Document property named by the partition key path, e.g. ``category``."""
        return self.partition_key_path.lstrip("/")

    @property
    def has_service_principal(self) -> bool:
        return bool(self.client_id and self.client_secret and self.tenant_id)

    @property
    def is_configured(self) -> bool:
        """True when an endpoint and some usable credential are present."""
        if not self.endpoint:
            return False
        return bool(self.key) or self.has_service_principal or self.use_aad


@dataclass(frozen=True)
class AppSettings:
    """Process-level settings for the HTTP server."""

    products_file: Path = Path("data/products.json")
    public_dir: Path = Path("public")
    host: str = "0.0.0.0"
    port: int = 3000
    log_dir: str = "."
    log_level: str = "INFO"
    cosmos: CosmosSettings = field(default_factory=CosmosSettings)

    @classmethod
    def from_env(cls) -> "AppSettings":
        default_log_dir = "/app/logs" if os.path.exists("/app/logs") else "."
        return cls(
            products_file=Path(os.getenv("PRODUCTS_FILE", "data/products.json")),
            public_dir=Path(os.getenv("PUBLIC_DIR", "public")),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            log_dir=os.getenv("LOG_DIR", default_log_dir),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cosmos=CosmosSettings.from_env(),
        )
