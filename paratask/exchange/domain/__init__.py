"""Domain layer for the exchange channel."""

from paratask.exchange.domain.exchange_payload import ExchangePayload
from paratask.exchange.domain.exchange_port import ExchangePort

__all__ = ["ExchangePayload", "ExchangePort"]
