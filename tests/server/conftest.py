"""Pytest fixtures for server module testing."""

import pytest

from tests.its.samples import IMEI


@pytest.fixture(autouse=True)
def its_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Bind the ITS listener to a free loopback port with one known device."""
    monkeypatch.setenv("ITS_TCP_HOST", "127.0.0.1")
    monkeypatch.setenv("ITS_TCP_PORT", "0")
    monkeypatch.setenv("ITS_DEVICES", IMEI)
    monkeypatch.delenv("ITS_REGISTER_UNKNOWN", raising=False)
    monkeypatch.delenv("ITS_LOG_FILE", raising=False)
    monkeypatch.delenv("ITS_LOG_JSON", raising=False)
