"""Módulo core: cliente simples, executor concorrente e configuração."""

from .client import RestClient
from .config import ClientConfig
from .multi import RestClientMulti

__all__ = ["ClientConfig", "RestClient", "RestClientMulti"]
