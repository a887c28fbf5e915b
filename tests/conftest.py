"""Pytest configuration: environment isolation and quiet third-party logs."""

from __future__ import annotations

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Keep python-dotenv from reading local .env files.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv") is None:
        monkeypatch.setattr("dotenv.load_dotenv", lambda *_a, **_kw: False)


@pytest.fixture(autouse=True)
def isolate_wikigraph_env(request, monkeypatch):
    """Clear WIKIGRAPH_* variables so Config falls back to its defaults.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution") is not None:
        return
    for key in [k for k in os.environ if k.startswith("WIKIGRAPH_")]:
        monkeypatch.delenv(key)


@pytest.fixture(scope="session", autouse=True)
def quiet_http_loggers():
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
