"""Exchange channel moving task payloads into worker processes."""

from .domain.exchange_payload import ExchangePayload
from .domain.exchange_port import ExchangePort
from .infrastructure.filesystem_exchange import FilesystemExchange

__all__ = [
    "ExchangePayload",
    "ExchangePort",
    "FilesystemExchange",
]
