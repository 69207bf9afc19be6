"""Executor concorrente: várias requisições sobre um transporte compartilhado."""

import time
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from ..http import HttpxTransport, PollState, Transport
from ..models import Completion, Outcome, OutcomeKind, RequestDescriptor, ResultRecord
from ..processors import ResultAggregator
from ..utils import DiagnosticEvent, DiagnosticRecorder, LoggingRecorder, get_logger
from ..utils.encoding import decode_json
from .client import RestClient
from .config import ClientConfig, validate_limit, validate_poll_interval

logger = get_logger(__name__)

FIRST_FAILING_HTTP_CODE = 400
NO_CONTENT = 204


@dataclass
class _InFlight:
    """Associação entre uma operação ativa e o descritor que a originou."""

    position: int
    descriptor: RequestDescriptor


class RestClientMulti:
    """
    Executa vários descritores com concorrência limitada.

    Um backlog FIFO alimenta o conjunto em andamento; a cada conclusão lida do
    transporte a operação é retirada e, se houver backlog, exatamente uma nova
    é admitida. Tudo roda na thread de quem chama ``execute``: o único ponto
    de espera é ``Transport.wait``, limitado pelo intervalo de poll.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        recorder: DiagnosticRecorder | None = None,
    ):
        """
        Args:
            config: Configuração (usa padrão se None)
            transport: Multiplexador de requisições (HttpxTransport se None)
            recorder: Destino dos eventos de diagnóstico (logging se None)

        Raises:
            TransportError: Se o transporte padrão não puder ser criado
        """
        self.config = config or ClientConfig()
        self.transport = transport or HttpxTransport(timeout=self.config.timeout)
        self.recorder = recorder or LoggingRecorder()

        self.queue: deque[RequestDescriptor] = deque()
        self._limit = self.config.limit
        self._poll_interval_us = self.config.poll_interval_us

        self.outcomes: list[Outcome] = []
        self.initial_admissions = 0
        self.peak_in_flight = 0

    def __enter__(self) -> "RestClientMulti":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<RestClientMulti queued={len(self.queue)} limit={self._limit} "
            f"poll_interval_us={self._poll_interval_us}>"
        )

    def close(self) -> None:
        self.transport.close()

    # ------------------------------------------------------------------
    # Configuração
    # ------------------------------------------------------------------

    def enqueue(
        self,
        descriptors: RequestDescriptor | RestClient | Sequence[RequestDescriptor | RestClient],
    ) -> bool:
        """
        Adiciona descritores ao backlog, preservando a ordem.

        ``RestClient`` com requisição preparada (auto execute desligado) é
        aceito e convertido no seu descritor.

        Returns:
            True se todos foram adicionados; False no primeiro item inválido
            (os anteriores permanecem no backlog)
        """
        if isinstance(descriptors, (str, bytes)) or not isinstance(descriptors, Sequence):
            descriptors = [descriptors]

        for item in descriptors:
            if isinstance(item, RestClient):
                item = item.descriptor()

            if not isinstance(item, RequestDescriptor):
                logger.warning(f"Item rejeitado (não é um descritor de requisição): {item!r}")
                return False

            self.queue.append(item)

        return True

    add_client = enqueue

    def set_concurrency_limit(self, limit: int) -> "RestClientMulti":
        """Define o máximo de requisições simultâneas (0 = sem limite)."""
        self._limit = validate_limit(int(limit))
        return self

    limit = set_concurrency_limit

    def set_poll_interval(self, microseconds: int) -> "RestClientMulti":
        """Define a espera máxima entre polls sem conclusão."""
        self._poll_interval_us = validate_poll_interval(int(microseconds))
        return self

    poll_frequency = set_poll_interval

    def admission_count(self, total: int) -> int:
        """
        Quantos descritores entram na primeira admissão.

        No modo legado, sem limite efetivo (0 ou >= total) são admitidos
        ``total - 1``; o restante entra à medida que operações concluem.
        """
        if 0 < self._limit < total:
            return self._limit
        if self.config.legacy_admission:
            return total - 1
        return total

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def execute(
        self,
        merge: Callable[[list[ResultRecord]], Any] | None = None,
        should_stop: Callable[[], bool] | None = None,
    ) -> Any:
        """
        Executa todo o backlog e agrega os resultados.

        Args:
            merge: Função aplicada à lista de resultados (opcional)
            should_stop: Chamável consultado a cada poll; True cancela o lote

        Returns:
            ``merge(resultados)`` ou a lista de ResultRecord em ordem de conclusão
        """
        results: list[ResultRecord] = []
        backlog = self.queue
        self.queue = deque()

        self.outcomes = [Outcome(descriptor=d) for d in backlog]
        self.initial_admissions = 0
        self.peak_in_flight = 0

        if not backlog:
            return ResultAggregator.aggregate(results, merge)

        total = len(backlog)
        in_flight: dict[int, _InFlight] = {}
        positions = iter(range(total))

        def admit() -> None:
            descriptor = backlog.popleft()
            handle = self.transport.start(descriptor)
            in_flight[handle] = _InFlight(next(positions), descriptor)
            self.peak_in_flight = max(self.peak_in_flight, len(in_flight))

        self.initial_admissions = self.admission_count(total)
        for _ in range(self.initial_admissions):
            admit()

        logger.info(
            f"Executando {total} requisições "
            f"(limite={self._limit or 'todas'}, admitidas={self.initial_admissions})"
        )

        started = time.perf_counter()
        running = True
        while running or backlog:
            if self._stop_requested(should_stop):
                self._abandon(in_flight, "cancel", "Lote cancelado pelo chamador")
                break

            status = self.transport.poll()
            while status.state is PollState.CALL_AGAIN:
                if self._stop_requested(should_stop):
                    break
                self.transport.wait(self._poll_interval_us / 1_000_000)
                status = self.transport.poll()

            if status.state is PollState.CALL_AGAIN:
                self._abandon(in_flight, "cancel", "Lote cancelado pelo chamador")
                break

            if status.state is PollState.ERROR:
                self._abandon(in_flight, "poll_error", status.error or "")
                break

            running = status.still_running

            for completion in self.transport.drain_completed():
                entry = in_flight.pop(completion.handle, None)
                if entry is None:
                    continue
                self.transport.stop(completion.handle)
                self._retire(entry, completion, results)

                if backlog:
                    admit()
                    running = True

            if not in_flight and backlog:
                admit()
                running = True

        logger.info(
            f"Concluídas {len(results)}/{total} requisições com sucesso "
            f"em {time.perf_counter() - started:.3f}s"
        )
        return ResultAggregator.aggregate(results, merge)

    @staticmethod
    def _stop_requested(should_stop: Callable[[], bool] | None) -> bool:
        return should_stop is not None and bool(should_stop())

    def _retire(
        self, entry: _InFlight, completion: Completion, results: list[ResultRecord]
    ) -> None:
        """Converte uma conclusão em ResultRecord (ou diagnóstico) e registra o desfecho."""
        outcome = self.outcomes[entry.position]
        outcome.status_code = completion.status_code
        url = completion.info.url or entry.descriptor.url

        if completion.failed:
            outcome.kind = OutcomeKind.TRANSPORT_ERROR
            self.recorder.record(
                DiagnosticEvent(
                    kind="transport_error",
                    url=url,
                    status_code=completion.status_code,
                    detail=completion.error or "",
                    info=completion.info.as_dict(),
                )
            )
            return

        if completion.status_code >= FIRST_FAILING_HTTP_CODE:
            outcome.kind = OutcomeKind.HTTP_ERROR
            self.recorder.record(
                DiagnosticEvent(
                    kind="http_error",
                    url=url,
                    status_code=completion.status_code,
                    detail=f"{url} retornou código de erro {completion.status_code}",
                    info=completion.info.as_dict(),
                )
            )
            return

        outcome.kind = OutcomeKind.SUCCESS
        if completion.status_code == NO_CONTENT:
            body: Any = b""
        elif entry.descriptor.decode:
            body = decode_json(completion.content, url)
            if body is None:
                self.recorder.record(
                    DiagnosticEvent(
                        kind="decode_error",
                        url=url,
                        status_code=completion.status_code,
                        detail="Corpo não é JSON válido",
                    )
                )
        else:
            body = completion.content

        results.append(
            ResultRecord(status_code=completion.status_code, body=body, info=completion.info)
        )

    def _abandon(self, in_flight: dict[int, _InFlight], kind: str, detail: str) -> None:
        """Interrompe as operações restantes após falha do poll ou cancelamento."""
        self.recorder.record(
            DiagnosticEvent(
                kind=kind,
                detail=detail,
                info={"in_flight": len(in_flight)},
            )
        )
        for handle, entry in in_flight.items():
            self.transport.stop(handle)
            self.outcomes[entry.position].kind = OutcomeKind.ABORTED
        in_flight.clear()
