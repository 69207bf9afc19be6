"""Tests for ClientConfig and logging setup."""

import logging

import httpx
import pytest

from rest_client.core import ClientConfig
from rest_client.utils import DiagnosticEvent, LoggingRecorder, get_logger, setup_logging

pytestmark = pytest.mark.order(1)


class TestClientConfig:
    """Test suite for ClientConfig."""

    def test_defaults(self):
        config = ClientConfig()
        assert config.limit == 0
        assert config.poll_interval_us == 25_000
        assert config.poll_interval == pytest.approx(0.025)
        assert config.legacy_admission is True
        assert isinstance(config.timeout, httpx.Timeout)

    def test_zero_values_are_kept(self):
        config = ClientConfig(limit=0, poll_interval_us=0, legacy_admission=False)
        assert config.limit == 0
        assert config.poll_interval_us == 0
        assert config.legacy_admission is False

    def test_custom_timeout(self):
        timeout = httpx.Timeout(1.0)
        assert ClientConfig(timeout=timeout).timeout is timeout

    @pytest.mark.parametrize("kwargs", [{"limit": -1}, {"poll_interval_us": -5}])
    def test_negative_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            ClientConfig(**kwargs)


def test_logging_recorder_writes_warning(caplog):
    recorder = LoggingRecorder(log=logging.getLogger("rest_client.test"))
    event = DiagnosticEvent(kind="http_error", url="http://h/x", status_code=404, detail="gone")

    with caplog.at_level(logging.WARNING, logger="rest_client.test"):
        recorder.record(event)

    assert "[http_error] http://h/x status=404 - gone" in caplog.text


def test_package_logger_is_silent_by_default():
    handlers = logging.getLogger("rest_client").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("rest_client", "rest_client"),
        ("rest_client.core.multi", "rest_client.core.multi"),
        ("__main__", "rest_client.__main__"),
        ("rest_clientx", "rest_client.rest_clientx"),
    ],
)
def test_get_logger_stays_in_package_namespace(name, expected):
    assert get_logger(name).name == expected


@pytest.mark.order(-1)
def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / "logs" / "rest.log"

    setup_logging(level="DEBUG", log_file=log_file)
    logging.getLogger("rest_client.test").debug("mensagem de teste")

    for handler in logging.getLogger("rest_client").handlers:
        handler.flush()

    assert log_file.exists()
    assert "mensagem de teste" in log_file.read_text(encoding="utf-8")

    # Restaura a propagação para não afetar o caplog de outros testes
    logging.getLogger("rest_client").propagate = True
