"""Módulo de utilitários para logging e diagnósticos."""

from .diagnostics import DiagnosticEvent, DiagnosticRecorder, LoggingRecorder, MemoryRecorder
from .logging import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "DiagnosticEvent",
    "DiagnosticRecorder",
    "LoggingRecorder",
    "MemoryRecorder",
]
