"""Shared fixtures for webhook verifier tests."""

import time

import pytest

NOW = 1614556800


@pytest.fixture
def frozen_time(monkeypatch):
    """Freeze time.time() at NOW; returns a setter to move the clock."""
    current = {"now": float(NOW)}
    monkeypatch.setattr(time, "time", lambda: current["now"])

    def set_now(value):
        current["now"] = float(value)

    return set_now


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep WEBHOOK_* environment variables out of tests."""
    for name in (
        "WEBHOOK_SECRET",
        "WEBHOOK_TOLERANCE",
        "WEBHOOK_SIGNATURE_HEADER",
        "WEBHOOK_SCHEME",
        "WEBHOOK_REQUIRE_VERIFIED",
    ):
        monkeypatch.delenv(name, raising=False)
