"""Cliente REST com executor concorrente de requisições."""

from .core import ClientConfig, RestClient, RestClientMulti
from .http import HttpxTransport, TransportError
from .models import Method, Outcome, OutcomeKind, RequestDescriptor, ResultRecord

__all__ = [
    "ClientConfig",
    "RestClient",
    "RestClientMulti",
    "HttpxTransport",
    "TransportError",
    "Method",
    "RequestDescriptor",
    "ResultRecord",
    "Outcome",
    "OutcomeKind",
]
