"""Configurações e constantes do cliente."""

import httpx

from ..http import HttpxTransport


class ClientConfig:
    """Configurações do executor concorrente e do cliente simples."""

    # Concorrência (0 = sem limite)
    DEFAULT_LIMIT = 0

    # Intervalo entre polls sem conclusão (microssegundos)
    DEFAULT_POLL_INTERVAL_US = 25_000

    # Mantém a admissão inicial de total - 1 quando não há limite efetivo
    DEFAULT_LEGACY_ADMISSION = True

    DEFAULT_TIMEOUT = HttpxTransport.DEFAULT_TIMEOUT

    DEFAULT_HEADERS = (
        "User-Agent: rest-client/1.0 (+https://www.python-httpx.org)",
        "Accept: */*",
    )

    def __init__(
        self,
        limit: int | None = None,
        poll_interval_us: int | None = None,
        legacy_admission: bool | None = None,
        timeout: httpx.Timeout | None = None,
    ):
        """
        Args:
            limit: Número máximo de requisições simultâneas (0 = todas)
            poll_interval_us: Espera máxima entre polls, em microssegundos
            legacy_admission: Admitir total - 1 requisições quando sem limite
            timeout: Timeout padrão do transporte
        """
        self.limit = self.DEFAULT_LIMIT if limit is None else limit
        self.poll_interval_us = (
            self.DEFAULT_POLL_INTERVAL_US if poll_interval_us is None else poll_interval_us
        )
        self.legacy_admission = (
            self.DEFAULT_LEGACY_ADMISSION if legacy_admission is None else legacy_admission
        )
        self.timeout = timeout or self.DEFAULT_TIMEOUT

        self._validate_config()

    def __repr__(self) -> str:
        return (
            f"<ClientConfig limit={self.limit} poll_interval_us={self.poll_interval_us} "
            f"legacy_admission={self.legacy_admission}>"
        )

    @property
    def poll_interval(self) -> float:
        """Intervalo de poll em segundos."""
        return self.poll_interval_us / 1_000_000

    def _validate_config(self) -> None:
        """Valida as configurações."""
        validate_limit(self.limit)
        validate_poll_interval(self.poll_interval_us)


def validate_limit(limit: int) -> int:
    if limit < 0:
        raise ValueError(f"Limite de concorrência não pode ser negativo: {limit}")
    return limit


def validate_poll_interval(poll_interval_us: int) -> int:
    if poll_interval_us < 0:
        raise ValueError(f"Intervalo de poll não pode ser negativo: {poll_interval_us}")
    return poll_interval_us
