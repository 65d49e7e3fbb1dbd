"""Product catalog service backed by Azure Cosmos DB or a local JSON file."""

__version__ = "1.0.0"
