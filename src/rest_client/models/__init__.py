"""Modelos de dados do cliente."""

from .request import Method, RequestDescriptor
from .result import (
    Completion,
    Outcome,
    OutcomeKind,
    ResponseInfo,
    RestResponse,
    ResultRecord,
)

__all__ = [
    "Method",
    "RequestDescriptor",
    "ResponseInfo",
    "ResultRecord",
    "RestResponse",
    "Completion",
    "Outcome",
    "OutcomeKind",
]
