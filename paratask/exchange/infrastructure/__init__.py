"""Infrastructure layer for the exchange channel."""

from .filesystem_exchange import FilesystemExchange

__all__ = ["FilesystemExchange"]
