"""Registro estruturado de diagnósticos do executor concorrente."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    """Evento de diagnóstico emitido durante uma execução."""

    kind: str
    url: str = ""
    status_code: int | None = None
    detail: str = ""
    info: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        status = f" status={self.status_code}" if self.status_code is not None else ""
        detail = f" - {self.detail}" if self.detail else ""
        return f"[{self.kind}] {self.url}{status}{detail}"


class DiagnosticRecorder(Protocol):
    """Interface para quem recebe os eventos de diagnóstico."""

    def record(self, event: DiagnosticEvent, /) -> None: ...


class LoggingRecorder:
    """Encaminha eventos de diagnóstico para o logging padrão."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.WARNING):
        self.log = log or logger
        self.level = level

    def record(self, event: DiagnosticEvent) -> None:
        self.log.log(self.level, f"{event}", extra={"diagnostic": event.kind})


class MemoryRecorder:
    """Guarda eventos em memória (útil em testes e inspeção)."""

    def __init__(self) -> None:
        self.events: list[DiagnosticEvent] = []

    def record(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> list[DiagnosticEvent]:
        return [e for e in self.events if e.kind == kind]
