"""Exception types raised by the catalog store and HTTP layer."""


class CatalogError(Exception):
    """Base class for all catalog errors."""


class ConfigurationError(CatalogError):
    """Cosmos DB settings are missing or invalid."""


class ConnectivityError(CatalogError):
    """Cosmos DB could not be reached or rejected the credentials."""


class DataError(CatalogError):
    """Catalog data is malformed or a record is missing a required field."""


class StorageError(DataError):
    """Reading or writing the catalog snapshot failed."""


class ValidationError(CatalogError):
    """A request body failed validation."""
