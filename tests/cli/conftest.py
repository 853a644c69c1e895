"""Shared fixtures for CLI tests.

Provides stores over the simple workspace in the states the commands care
about: fully exempted (passes), empty (fails), and malformed (errors).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

THIRD_PARTIES = ["third-party1", "third-party2", "transitive-third-party1"]


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def exempted_store(write_store, ledger_doc: dict[str, Any]) -> tuple[Path, Path]:
    """Every third-party package exempted; one stale exemption."""
    exemptions = {name: [{"version": "10.0.0"}] for name in THIRD_PARTIES}
    exemptions["old-crate"] = [{"version": "1.0.0", "suggest": False}]
    return write_store(audits=ledger_doc, config={"exemptions": exemptions})


@pytest.fixture
def empty_store(write_store, ledger_doc: dict[str, Any]) -> tuple[Path, Path]:
    """No audits and no exemptions: every third-party package fails."""
    return write_store(audits=ledger_doc)


@pytest.fixture
def audited_store(write_store, ledger_doc: dict[str, Any]) -> tuple[Path, Path]:
    """third-party1 reached by a delta chain, others fully audited."""
    ledger_doc["audits"] = {
        "third-party1": [
            {"version": "9.0.0", "criteria": "reviewed"},
            {"delta": "9.0.0 -> 10.0.0", "criteria": "reviewed"},
        ],
        "third-party2": [{"version": "10.0.0", "criteria": "strong-reviewed"}],
        "transitive-third-party1": [{"version": "10.0.0", "criteria": "reviewed"}],
    }
    return write_store(audits=ledger_doc)


@pytest.fixture
def cyclic_store(write_store) -> tuple[Path, Path]:
    """Criteria that imply each other."""
    audits = {"criteria": {"a": {"implies": "b", "default": True}, "b": {"implies": "a"}}}
    return write_store(audits=audits)
