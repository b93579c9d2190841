"""Service clients for the cruise backend APIs."""

from .availability_client import AvailabilityClient
from .backend import BackendClient, BackendResponseError
from .catalog_client import CatalogClient

__all__ = [
    "AvailabilityClient",
    "BackendClient",
    "BackendResponseError",
    "CatalogClient",
]
