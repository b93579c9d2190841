"""Search destinations."""

from .catalog import DEFAULT_DESTINATIONS, Destination, DestinationCatalog

__all__ = ["DEFAULT_DESTINATIONS", "Destination", "DestinationCatalog"]
