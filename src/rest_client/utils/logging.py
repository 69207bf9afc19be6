"""Configuração centralizada de logging."""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any

PACKAGE_LOGGER = "rest_client"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s [%(filename)s:%(lineno)d]"

# Bibliotecas que logam cada requisição em INFO
NOISY_LOGGERS = ("httpx", "httpcore")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Sem setup_logging, a biblioteca não emite nada por conta própria
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def _file_handler(log_file: str | Path, level: str) -> dict[str, Any]:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "standard",
        "filename": str(log_path),
        "maxBytes": LOG_FILE_MAX_BYTES,
        "backupCount": LOG_FILE_BACKUPS,
        "encoding": "utf-8",
    }


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    format: str | None = None,
) -> None:
    """
    Configura o logging da aplicação que usa o cliente (ex.: a CLI).

    O logger ``rest_client`` passa a escrever no console (e no arquivo, se
    informado) sem propagar para o root; httpx/httpcore ficam em WARNING.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Arquivo rotativo para os logs (None para apenas console)
        format: Formato personalizado dos logs
    """
    level = level.upper()
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "standard",
            "stream": sys.stdout,
        },
    }
    if log_file:
        handlers["file"] = _file_handler(log_file, level)

    names = list(handlers)
    loggers: dict[str, dict[str, Any]] = {
        PACKAGE_LOGGER: {"handlers": names, "level": level, "propagate": False},
    }
    for noisy in NOISY_LOGGERS:
        loggers[noisy] = {"handlers": names, "level": "WARNING", "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": format or DEFAULT_FORMAT,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": handlers,
            "loggers": loggers,
            "root": {"handlers": names, "level": "WARNING"},
        }
    )

    logging.getLogger(PACKAGE_LOGGER).info(
        f"Logging configurado (level: {level}, arquivo: {log_file or '-'})"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Retorna logger dentro da hierarquia ``rest_client``.

    Nomes de fora do pacote (ex.: scripts) são prefixados para herdar a
    configuração feita por ``setup_logging``.
    """
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
