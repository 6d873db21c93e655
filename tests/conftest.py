from __future__ import annotations

from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

import pytest

from sintesis_pasarela import (
    EventEmitter,
    FrameHost,
    GatewayConfig,
    GatewaySession,
    HeadlessHost,
    NetworkError,
    RenderDispatcher,
)
from sintesis_pasarela.core.session import AUTHENTICATE_PATH, GENERATE_LINK_PATH

API_KEY = "dGVzdC1hcGkta2V5LXZhbHVl=="


def auth_ok(token: str = "token-1", expires_in: Optional[int] = 1800) -> Dict[str, Any]:
    data: Dict[str, Any] = {"accessToken": token}
    if expires_in is not None:
        data["expiresIn"] = expires_in
    return {"success": True, "data": data, "message": "ok"}


def link_ok(url: str = "https://pay.example/embed/abc") -> Dict[str, Any]:
    return {"success": True, "data": {"embedUrl": url}, "message": "ok"}


class FakeTransport:
    """Replays queued responses per path; exceptions in the queue are raised."""

    def __init__(self) -> None:
        self.queues: Dict[str, Deque[Any]] = defaultdict(deque)
        self.defaults: Dict[str, Any] = {}
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []
        self.before_response: Optional[Callable[[str], Any]] = None

    def queue(self, path: str, *responses: Any) -> None:
        self.queues[path].extend(responses)

    def always(self, path: str, response: Any) -> None:
        self.defaults[path] = response

    def count(self, path: str) -> int:
        return sum(1 for call in self.calls if call[0] == path)

    async def request(self, path, *, method="GET", headers=None, body=None):
        self.calls.append((path, method, dict(headers or {})))
        if self.before_response is not None:
            await self.before_response(path)
        if self.queues[path]:
            response = self.queues[path].popleft()
        elif path in self.defaults:
            response = self.defaults[path]
        else:
            raise AssertionError(f"no response queued for {path}")
        if isinstance(response, BaseException):
            raise response
        return response


class RecordingHost(HeadlessHost):
    """Headless host whose timers are recorded instead of scheduled."""

    def __init__(self) -> None:
        self.scheduled: List[Tuple[int, Callable[[], None], float]] = []
        self.cancelled: List[int] = []
        self._next = 0

    def schedule_delayed(self, fn, delay_ms):
        self._next += 1
        self.scheduled.append((self._next, fn, delay_ms))
        return self._next

    def cancel_delayed(self, handle):
        self.cancelled.append(handle)

    @property
    def pending(self) -> List[int]:
        return [handle for handle, _, _ in self.scheduled if handle not in self.cancelled]

    def fire_latest(self) -> None:
        _, fn, _ = self.scheduled[-1]
        fn()


class RecordingFrameHost(FrameHost):
    def __init__(self) -> None:
        self.surfaces: List[Tuple[str, Any]] = []
        super().__init__(self._create)
        self.scheduled: List[float] = []

    def _create(self, url, config):
        self.surfaces.append((url, config))
        return {"iframe": url, "target": config.target}

    def schedule_delayed(self, fn, delay_ms):
        self.scheduled.append(delay_ms)
        return len(self.scheduled)

    def cancel_delayed(self, handle):
        pass


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def fixed_clock() -> datetime:
    return datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(api_key=API_KEY, base_url="https://gateway.test/api/v1")


@pytest.fixture
def transport() -> FakeTransport:
    fake = FakeTransport()
    fake.always(AUTHENTICATE_PATH, auth_ok())
    fake.always(GENERATE_LINK_PATH, link_ok())
    return fake


@pytest.fixture
def failing_transport() -> FakeTransport:
    fake = FakeTransport()
    fake.always(AUTHENTICATE_PATH, NetworkError("Gateway responded with 503: down", status_code=503))
    fake.always(GENERATE_LINK_PATH, link_ok())
    return fake


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def events() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def make_session(config, host, events, sleep):
    def factory(transport, **overrides) -> GatewaySession:
        return GatewaySession(
            overrides.pop("config", config),
            transport,
            host=overrides.pop("host", host),
            events=overrides.pop("events", events),
            sleep=overrides.pop("sleep", sleep),
            clock=fixed_clock,
        )

    return factory


@pytest.fixture
def make_dispatcher(make_session):
    def factory(transport, **overrides) -> RenderDispatcher:
        return RenderDispatcher(make_session(transport, **overrides))

    return factory
