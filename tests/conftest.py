"""Pytest fixtures for the product store and HTTP API tests."""

import json

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError
from fastapi.testclient import TestClient

from product_catalog import cosmos_store
from product_catalog.config import AppSettings, CosmosSettings
from product_catalog.server import create_app
from product_catalog.store import ProductStore

SAMPLE_PRODUCTS = [
    {"id": "1", "title": "Shoes", "description": "Running shoes", "image": "shoes.png",
     "price": 100, "category": "Footwear"},
    {"id": "2", "title": "Bottle", "description": "Water bottle", "image": "bottle.png",
     "price": 50, "category": "Outdoor"},
]


class FakeContainer:
    """In-memory stand-in for a Cosmos DB container client."""

    def __init__(self, pk_property="category", items=None):
        self.pk_property = pk_property
        self.items = {}
        self.upserts = []
        self.fail_upsert_at = None
        self.fail_delete_ids = set()
        for item in items or []:
            self.items[(item["id"], item.get(pk_property))] = dict(item)

    def query_items(self, query, enable_cross_partition_query=False, **kwargs):
        assert query == "SELECT * FROM c"
        assert enable_cross_partition_query
        return iter([dict(item) for item in self.items.values()])

    def upsert_item(self, body, **kwargs):
        if self.fail_upsert_at is not None and len(self.upserts) == self.fail_upsert_at:
            raise CosmosHttpResponseError(status_code=503, message="service unavailable")
        self.upserts.append(body)
        stored = {**body, "_etag": f"etag-{len(self.upserts)}"}
        self.items[(body["id"], body.get(self.pk_property))] = stored
        return dict(stored)

    def delete_item(self, item, partition_key, **kwargs):
        if item in self.fail_delete_ids:
            raise CosmosHttpResponseError(status_code=404, message="not found")
        del self.items[(item, partition_key)]


class FakeDatabase:
    def __init__(self, container):
        self.container = container
        self.created_containers = []

    def create_container_if_not_exists(self, id, partition_key, **kwargs):
        self.created_containers.append((id, partition_key))
        return self.container


class FakeCosmosClient:
    """Records how it was constructed and hands out a shared FakeContainer."""

    instances = []
    container = None
    error = None

    def __init__(self, url, credential=None, **kwargs):
        self.url = url
        self.credential = credential
        self.kwargs = kwargs
        self.database = FakeDatabase(FakeCosmosClient.container)
        self.created_databases = []
        FakeCosmosClient.instances.append(self)

    def create_database_if_not_exists(self, id, **kwargs):
        if FakeCosmosClient.error is not None:
            raise FakeCosmosClient.error
        self.created_databases.append(id)
        return self.database


@pytest.fixture
def fake_cosmos(monkeypatch):
    """Patch the Cosmos SDK client; returns the container every connection uses."""
    container = FakeContainer()
    FakeCosmosClient.instances = []
    FakeCosmosClient.container = container
    FakeCosmosClient.error = None
    monkeypatch.setattr(cosmos_store, "CosmosClient", FakeCosmosClient)
    return container


@pytest.fixture
def cosmos_settings():
    return CosmosSettings(endpoint="https://example.documents.azure.com:443/", key="c2VjcmV0")


@pytest.fixture
def products_file(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps(SAMPLE_PRODUCTS, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def local_store(products_file):
    """Store with no Cosmos credentials, so it always uses the JSON file."""
    return ProductStore(CosmosSettings(), products_file)


@pytest.fixture
def public_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    (path / "index.html").write_text("<html><body>catalog</body></html>", encoding="utf-8")
    (path / "styles.css").write_text("body { color: black; }", encoding="utf-8")
    return path


@pytest.fixture
def client(local_store, products_file, public_dir):
    settings = AppSettings(products_file=products_file, public_dir=public_dir)
    app = create_app(settings=settings, store=local_store)
    with TestClient(app) as test_client:
        yield test_client


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))
