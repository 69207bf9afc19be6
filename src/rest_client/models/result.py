"""Modelos de resposta, resultados e desfechos de execução."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .request import RequestDescriptor


@dataclass
class ResponseInfo:
    """Metadados de diagnóstico de uma resposta."""

    url: str
    status_code: int
    elapsed: float = 0.0
    request_body: str | bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "http_code": self.status_code,
            "total_time": self.elapsed,
            "body": self.request_body,
        }


@dataclass
class ResultRecord:
    """Resultado de uma requisição concluída com status < 400."""

    status_code: int
    body: Any
    info: ResponseInfo

    def __repr__(self) -> str:
        return f"<ResultRecord status={self.status_code} url={self.info.url}>"


@dataclass
class RestResponse:
    """Retorno de uma execução síncrona do RestClient."""

    info: ResponseInfo
    response: Any = None

    @property
    def status_code(self) -> int:
        return self.info.status_code

    @property
    def ok(self) -> bool:
        return 0 < self.info.status_code < 400


@dataclass
class Completion:
    """Operação finalizada, entregue pelo transporte ao executor."""

    handle: int
    status_code: int
    content: bytes
    info: ResponseInfo
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Falha de transporte (conexão, timeout), não de status HTTP."""
        return self.error is not None


class OutcomeKind(Enum):
    """Desfecho de um descritor dentro de um lote."""

    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"
    ABORTED = "aborted"
    NOT_RUN = "not_run"


@dataclass
class Outcome:
    """Desfecho por descritor, na ordem de submissão."""

    descriptor: RequestDescriptor
    kind: OutcomeKind = OutcomeKind.NOT_RUN
    status_code: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def __repr__(self) -> str:
        status = f" status={self.status_code}" if self.status_code is not None else ""
        return f"<Outcome {self.kind.value}{status} url={self.descriptor.url}>"
