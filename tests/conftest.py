"""Pytest configuration and fixtures for rest client tests."""

import itertools
from collections.abc import Callable

import httpx
import pytest

from rest_client.core import ClientConfig, RestClientMulti
from rest_client.http import PollResult, PollState
from rest_client.models import Completion, RequestDescriptor, ResponseInfo
from rest_client.utils import MemoryRecorder

Responder = Callable[[RequestDescriptor], tuple[int, bytes]]


def ok_responder(descriptor: RequestDescriptor) -> tuple[int, bytes]:
    """Responde 200 com ``ok-<sufixo da URL>``."""
    return 200, f"ok-{descriptor.url.rsplit('/', 1)[-1]}".encode()


class FakeTransport:
    """
    Transporte em memória: cada poll conclui uma operação.

    ``order="fifo"`` conclui a operação iniciada há mais tempo,
    ``order="reverse"`` a mais recente.
    """

    def __init__(
        self,
        responder: Responder = ok_responder,
        order: str = "fifo",
        fail_after: int | None = None,
        call_again: bool = False,
        transport_errors: set[str] | None = None,
    ):
        self.responder = responder
        self.order = order
        self.fail_after = fail_after
        self.call_again = call_again
        self.transport_errors = transport_errors or set()

        self._ids = itertools.count(1)
        self._ready = False
        self.active: dict[int, RequestDescriptor] = {}
        self.live: set[int] = set()
        self.done: list[Completion] = []

        self.started: list[RequestDescriptor] = []
        self.started_before_first_poll: int | None = None
        self.stopped: list[int] = []
        self.wait_calls: list[float] = []
        self.completed_count = 0
        self.poll_calls = 0
        self.max_live = 0
        self.closed = False

    def start(self, descriptor: RequestDescriptor) -> int:
        handle = next(self._ids)
        self.active[handle] = descriptor
        self.live.add(handle)
        self.started.append(descriptor)
        self.max_live = max(self.max_live, len(self.live))
        return handle

    def poll(self) -> PollResult:
        self.poll_calls += 1
        if self.started_before_first_poll is None:
            self.started_before_first_poll = len(self.started)

        if self.fail_after is not None and self.completed_count >= self.fail_after:
            return PollResult(PollState.ERROR, len(self.active), "engine failure")

        if not self.active:
            return PollResult(PollState.OK, 0)

        if self.call_again and not self._ready:
            self._ready = True
            return PollResult(PollState.CALL_AGAIN, len(self.active))
        self._ready = False

        handle = min(self.active) if self.order == "fifo" else max(self.active)
        descriptor = self.active.pop(handle)
        self.completed_count += 1

        if descriptor.url in self.transport_errors:
            info = ResponseInfo(url=descriptor.url, status_code=0)
            self.done.append(Completion(handle, 0, b"", info, error="ConnectError: refused"))
        else:
            status, body = self.responder(descriptor)
            info = ResponseInfo(url=descriptor.url, status_code=status, request_body=descriptor.body)
            self.done.append(Completion(handle, status, body, info))

        return PollResult(PollState.OK, len(self.active))

    def wait(self, timeout: float) -> None:
        self.wait_calls.append(timeout)

    def drain_completed(self) -> list[Completion]:
        drained, self.done = self.done, []
        return drained

    def stop(self, handle: int) -> None:
        self.stopped.append(handle)
        self.live.discard(handle)
        self.active.pop(handle, None)

    def close(self) -> None:
        self.closed = True


def make_descriptors(count: int, base: str = "http://example.test/item") -> list[RequestDescriptor]:
    return [RequestDescriptor.build("GET", f"{base}/{i}") for i in range(count)]


@pytest.fixture
def recorder() -> MemoryRecorder:
    return MemoryRecorder()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def multi(fake_transport, recorder) -> RestClientMulti:
    """Executor sobre o transporte em memória, sem espera entre polls."""
    return RestClientMulti(
        config=ClientConfig(poll_interval_us=0),
        transport=fake_transport,
        recorder=recorder,
    )


@pytest.fixture
def echo_handler():
    """Handler httpx que devolve método, URL e corpo recebidos."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "method": request.method,
                "url": str(request.url),
                "body": request.content.decode(),
                "headers": dict(request.headers),
            },
        )

    return handler
