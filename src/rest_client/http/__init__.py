"""Módulo HTTP: transporte multiplexado usado pelo executor concorrente."""

from .transport import (
    HttpxTransport,
    PollResult,
    PollState,
    Transport,
    TransportError,
    request_arguments,
)

__all__ = [
    "HttpxTransport",
    "PollResult",
    "PollState",
    "Transport",
    "TransportError",
    "request_arguments",
]
