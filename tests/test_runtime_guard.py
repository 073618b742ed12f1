"""Tests for runtime/environment guardrails."""

from __future__ import annotations

import importlib.util
from importlib import metadata

import pytest

from tmsync import __version__
from tmsync.utils import runtime
from tmsync.utils.runtime import describe_runtime, validate_runtime


def test_validate_runtime_accepts_supported_python():
    validate_runtime(min_python=(3, 12), required={}, python_version=(3, 12))


def test_validate_runtime_rejects_unsupported_python():
    with pytest.raises(RuntimeError) as exc:
        validate_runtime(min_python=(3, 12), required={}, python_version=(3, 11))

    message = str(exc.value)
    assert "Python >=3.12" in message
    assert "3.11" in message


def test_validate_runtime_reports_distribution_names(monkeypatch: pytest.MonkeyPatch):
    original_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str):
        if name == "pydantic_settings":
            return None
        return original_find_spec(name)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)

    with pytest.raises(RuntimeError) as exc:
        validate_runtime(
            required={"json": "json", "pydantic_settings": "pydantic-settings"},
            python_version=(3, 12),
        )

    message = str(exc.value)
    assert "pydantic-settings" in message
    assert "json" not in message.split(".")[0]
    assert "pip install -e" in message


def test_describe_runtime_lists_versions(monkeypatch: pytest.MonkeyPatch):
    def fake_version(dist: str) -> str:
        if dist == "missing-dist":
            raise metadata.PackageNotFoundError(dist)
        return "9.9"

    monkeypatch.setattr(runtime.metadata, "version", fake_version)

    summary = describe_runtime({"requests": "requests", "nope": "missing-dist"})

    assert summary.startswith(f"tmsync {__version__}, Python ")
    assert "requests 9.9" in summary
    assert "missing-dist (not installed)" in summary
