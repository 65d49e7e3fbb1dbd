"""Azure Cosmos DB backend for the product catalog."""

import logging
from typing import Any, Dict, List

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient, PartitionKey
from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.identity import ClientSecretCredential, DefaultAzureCredential

from product_catalog.config import CosmosSettings
from product_catalog.errors import ConfigurationError, ConnectivityError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_PARTITION_VALUE = "default"


def ensure_partition_key(product: Dict[str, Any], partition_key_property: str) -> Dict[str, Any]:
    """Return ``product`` with the partition key property filled in.

    A missing value is taken from ``category``, or ``"default"`` when that is
    absent as well. The input dict is not modified.
    """
    if product.get(partition_key_property) is not None:
        return product

    value = product.get("category") or DEFAULT_PARTITION_VALUE
    logger.warning(
        "Product %s has no '%s'; defaulting partition key to '%s'",
        product.get("id", "Unknown"), partition_key_property, value,
    )
    return {**product, partition_key_property: value}


def create_client(settings: CosmosSettings) -> CosmosClient:
    """Build a Cosmos client using the first credential that is configured."""
    if not settings.endpoint:
        raise ConfigurationError("COSMOS_ENDPOINT is not set")

    kwargs: Dict[str, Any] = {}
    if settings.use_emulator:
        # The emulator ships a self-signed certificate
        kwargs["connection_verify"] = False

    if settings.key:
        # Use key-based authentication
        return CosmosClient(settings.endpoint, settings.key, **kwargs)
    if settings.has_service_principal:
        # Use service principal authentication
        credential = ClientSecretCredential(
            tenant_id=settings.tenant_id,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
        )
        return CosmosClient(settings.endpoint, credential, **kwargs)
    if settings.use_aad:
        # Use AAD token authentication with DefaultAzureCredential
        return CosmosClient(settings.endpoint, DefaultAzureCredential(), **kwargs)

    raise ConfigurationError(
        "no Cosmos DB credential: set COSMOS_KEY, a service principal, or COSMOS_USE_AAD"
    )


def connect(settings: CosmosSettings):
    """Connect and make sure the database and container exist.

    Returns the container client. Any SDK failure is raised as
    ``ConnectivityError``.
    """
    try:
        client = create_client(settings)
        database = client.create_database_if_not_exists(id=settings.database_name)
        container = database.create_container_if_not_exists(
            id=settings.container_name,
            partition_key=PartitionKey(path=settings.partition_key_path),
        )
    except ConfigurationError:
        raise
    except (AzureError, ValueError, TypeError) as e:
        raise ConnectivityError(f"could not connect to Cosmos DB at {settings.endpoint}: {e}") from e

    logger.info(
        "Container '%s' in database '%s' ready with partition key on '%s'",
        settings.container_name, settings.database_name, settings.partition_key_path,
    )
    return container


class CosmosProductBackend:
    """Reads and writes the catalog in a Cosmos DB container."""

    remote = True

    def __init__(self, container, settings: CosmosSettings):
        self.container = container
        self.settings = settings

    def backend_info(self) -> Dict[str, str]:
        return {
            "endpoint": self.settings.endpoint,
            "databaseId": self.settings.database_name,
            "containerId": self.settings.container_name,
            "partitionKeyPath": self.settings.partition_key_path,
        }

    def read_all(self) -> List[Dict[str, Any]]:
        """Query every document in the container.

        The whole result set is materialized; there is no paging.
        """
        try:
            items = list(self.container.query_items(
                query="SELECT * FROM c",
                enable_cross_partition_query=True,
            ))
        except AzureError as e:
            logger.error("Error querying products: %s", e)
            raise StorageError("could not query products from Cosmos DB") from e
        logger.info("Query returned %s items", len(items))
        return items

    def replace_all(self, products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Upsert each product in order.

        There is no transaction: if an upsert fails, the products before it
        stay written and the rest are not.
        """
        pk_property = self.settings.partition_key_property
        results = []
        for product in products:
            document = ensure_partition_key(product, pk_property)
            try:
                results.append(self.container.upsert_item(document))
            except (CosmosHttpResponseError, AzureError) as e:
                logger.error(
                    "Failed to upsert product %s after %s of %s writes: %s",
                    document.get("id", "Unknown"), len(results), len(products), e,
                )
                raise StorageError(
                    f"upsert failed after {len(results)} of {len(products)} products"
                ) from e
        logger.info("Upserted %s products", len(results))
        return results
