"""Transporte multiplexado: várias requisições httpx em um event loop privado."""

import asyncio
import itertools
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Any, Protocol

import httpx

from ..models import Completion, RequestDescriptor, ResponseInfo
from ..utils import get_logger

logger = get_logger(__name__)


class TransportError(RuntimeError):
    """O contexto de transporte não pôde ser criado ou está inutilizável."""


class PollState(Enum):
    """Estado reportado por uma chamada de poll."""

    OK = "ok"
    CALL_AGAIN = "call_again"
    ERROR = "error"


@dataclass(frozen=True)
class PollResult:
    state: PollState
    running: int = 0
    error: str | None = None

    @property
    def still_running(self) -> bool:
        return self.running > 0


class Transport(Protocol):
    """Contrato entre o executor concorrente e a camada HTTP."""

    def start(self, descriptor: RequestDescriptor) -> int: ...

    def poll(self) -> PollResult: ...

    def wait(self, timeout: float) -> None: ...

    def drain_completed(self) -> list[Completion]: ...

    def stop(self, handle: int) -> None: ...

    def close(self) -> None: ...


def request_arguments(descriptor: RequestDescriptor) -> dict[str, Any]:
    """Traduz um descritor para os kwargs de ``httpx.Client.request``."""
    kwargs: dict[str, Any] = {"headers": descriptor.header_pairs()}

    if descriptor.payload is not None:
        kwargs["content"] = descriptor.payload
    if descriptor.timeout is not None:
        kwargs["timeout"] = descriptor.timeout
    if descriptor.auth is not None:
        kwargs["auth"] = descriptor.auth

    return kwargs


class HttpxTransport:
    """
    Multiplexador de requisições sobre ``httpx.AsyncClient``.

    Cada operação iniciada vira uma task em um event loop privado. O loop
    nunca roda sozinho: ele só avança dentro de ``poll`` (um passo, sem
    bloquear) e de ``wait`` (no máximo ``timeout`` segundos, retornando na
    primeira conclusão). Assim tudo acontece na thread de quem chama.
    """

    DEFAULT_TIMEOUT = httpx.Timeout(
        connect=5.0,  # Estabelecer conexão
        read=30.0,  # Ler resposta
        write=10.0,  # Enviar dados
        pool=5.0,  # Obter conexão do pool
    )

    def __init__(
        self,
        timeout: httpx.Timeout | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        follow_redirects: bool = True,
    ):
        """
        Args:
            timeout: Timeout padrão das requisições (descritores podem sobrescrever)
            transport: Transporte httpx alternativo (ex.: ``httpx.MockTransport``)
            follow_redirects: Seguir redirecionamentos automaticamente

        Raises:
            TransportError: Se o event loop ou o cliente httpx não puderem ser criados
        """
        try:
            self._loop = asyncio.new_event_loop()
        except Exception as e:
            raise TransportError(f"Não foi possível criar o event loop: {e}") from e

        try:
            self._client = httpx.AsyncClient(
                timeout=timeout or self.DEFAULT_TIMEOUT,
                transport=transport,
                follow_redirects=follow_redirects,
            )
        except Exception as e:
            self._loop.close()
            raise TransportError(f"Não foi possível iniciar o transporte HTTP: {e}") from e

        self._ids = itertools.count(1)
        self._tasks: dict[int, asyncio.Task] = {}
        self._stopped: list[asyncio.Task] = []
        self._completed: deque[Completion] = deque()
        self._failure: BaseException | None = None
        self._closed = False

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<HttpxTransport running={self.running} completed={len(self._completed)}>"

    @property
    def running(self) -> int:
        """Número de operações ainda em andamento."""
        return sum(1 for task in self._tasks.values() if not task.done())

    def start(self, descriptor: RequestDescriptor) -> int:
        """Agenda a requisição no loop privado e retorna seu identificador."""
        if self._closed:
            raise TransportError("Transporte já foi fechado")

        handle = next(self._ids)
        self._tasks[handle] = self._loop.create_task(self._perform(handle, descriptor))
        logger.debug(f"Operação {handle} iniciada: {descriptor.method.value} {descriptor.url}")
        return handle

    async def _perform(self, handle: int, descriptor: RequestDescriptor) -> None:
        """Executa uma requisição e enfileira sua conclusão (sucesso ou falha)."""
        started = time.perf_counter()
        try:
            response = await self._client.request(
                descriptor.method.value,
                descriptor.url,
                **request_arguments(descriptor),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Erro de requisição em {descriptor.url}: {e}")
            self._completed.append(self._failed(handle, descriptor, started, e))
            return
        except Exception as e:
            logger.error(f"Erro inesperado em {descriptor.url}: {e}")
            self._completed.append(self._failed(handle, descriptor, started, e))
            return

        info = ResponseInfo(
            url=str(response.url),
            status_code=response.status_code,
            elapsed=time.perf_counter() - started,
            request_body=descriptor.body,
            headers=dict(response.headers),
        )
        self._completed.append(
            Completion(
                handle=handle,
                status_code=response.status_code,
                content=response.content,
                info=info,
            )
        )

    @staticmethod
    def _failed(
        handle: int, descriptor: RequestDescriptor, started: float, error: Exception
    ) -> Completion:
        info = ResponseInfo(
            url=descriptor.url,
            status_code=0,
            elapsed=time.perf_counter() - started,
            request_body=descriptor.body,
        )
        return Completion(
            handle=handle,
            status_code=0,
            content=b"",
            info=info,
            error=f"{type(error).__name__}: {error}",
        )

    def poll(self) -> PollResult:
        """
        Avança o loop um passo sem bloquear.

        Returns:
            CALL_AGAIN se há operações rodando e nenhuma concluída,
            ERROR se o próprio loop falhou, OK caso contrário
        """
        if self._failure is None:
            try:
                self._loop.run_until_complete(asyncio.sleep(0))
            except Exception as e:
                logger.error(f"Falha ao fazer poll do transporte: {e}")
                self._failure = e

        if self._failure is not None:
            return PollResult(PollState.ERROR, self.running, str(self._failure))

        running = self.running
        if running and not self._completed:
            return PollResult(PollState.CALL_AGAIN, running)
        return PollResult(PollState.OK, running)

    def wait(self, timeout: float) -> None:
        """Roda o loop até a primeira conclusão ou até ``timeout`` segundos."""
        pending = {task for task in self._tasks.values() if not task.done()}
        if not pending or self._completed or self._failure is not None:
            return

        try:
            self._loop.run_until_complete(
                asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
            )
        except Exception as e:
            logger.error(f"Falha ao aguardar operações do transporte: {e}")
            self._failure = e

    def drain_completed(self) -> list[Completion]:
        """Retorna (e esquece) as conclusões acumuladas desde o último dreno."""
        drained = [c for c in self._completed if c.handle in self._tasks]
        self._completed.clear()
        return drained

    def stop(self, handle: int) -> None:
        """Remove uma operação do multiplexador, cancelando-a se ainda rodar."""
        task = self._tasks.pop(handle, None)
        if task is None:
            return
        if not task.done():
            task.cancel()
            self._stopped.append(task)
            logger.debug(f"Operação {handle} cancelada")

    def close(self) -> None:
        """Cancela o que restar, fecha o cliente httpx e o event loop."""
        if self._closed:
            return
        self._closed = True

        leftover = [t for t in self._tasks.values() if not t.done()] + self._stopped
        for task in leftover:
            task.cancel()
        self._tasks.clear()
        self._stopped.clear()

        try:
            if leftover:
                self._loop.run_until_complete(
                    asyncio.gather(*leftover, return_exceptions=True)
                )
            self._loop.run_until_complete(self._client.aclose())
        except Exception as e:
            logger.error(f"Erro ao fechar o transporte: {e}")
        finally:
            self._loop.close()
