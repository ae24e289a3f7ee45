"""Shared fixtures for the switchboard test suite.

Every test runs offline: backends are either the scripted ``MockBackend`` or a
real adapter whose vendor client has been replaced by a local double.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Type

import pytest

from switchboard.base.factory import BackendFactory
from switchboard.base.models import BackendConfig
from switchboard.base.usage import InMemoryUsageLog
from switchboard.mock.client import MockBackend


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    """Keep a developer's ``.env`` out of config merging."""
    import switchboard.config as config

    monkeypatch.setattr(config, "_DOTENV_LOADED", True)


@pytest.fixture
def usage_log() -> InMemoryUsageLog:
    return InMemoryUsageLog()


def backend_config(kind: str = "mock", *, retry_attempts: int = 1, **extra: Any) -> BackendConfig:
    """Config for a scripted backend with zero backoff; ``extra`` is the script."""
    return BackendConfig(
        backend_kind=kind,
        retry_attempts=retry_attempts,
        retry_delay_ms=0,
        extra=extra,
    )


@pytest.fixture
def mock_config() -> Callable[..., BackendConfig]:
    return backend_config


class MockFactory:
    """Factory double: every kind is served by a ``MockBackend`` reporting that kind.

    Lets manager tests configure several distinct backends without network
    access while display metadata still comes from the real registry.
    """

    _classes: Dict[str, Type[MockBackend]] = {}

    @classmethod
    def create(cls, config: BackendConfig, *, usage_recorder=None, logger=None) -> MockBackend:
        kind = config.backend_kind
        klass = cls._classes.get(kind)
        if klass is None:
            klass = type(f"Mock_{kind}", (MockBackend,), {"backend_kind": kind})
            cls._classes[kind] = klass
        return klass(config, usage_recorder=usage_recorder, logger=logger)

    get_backend_info = staticmethod(BackendFactory.get_backend_info)


@pytest.fixture
def mock_factory() -> Type[MockFactory]:
    return MockFactory


class ListHandler(logging.Handler):
    """Collect the JSON payload of every record."""

    def __init__(self) -> None:
        super().__init__(logging.DEBUG)
        self.events: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.events.append(json.loads(record.getMessage()))

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("event") == event]


@pytest.fixture
def captured_logger(request):
    """Isolated logger plus the handler recording its structured events."""
    logger = logging.getLogger(f"switchboard-test.{request.node.name}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)

