"""Tests for import fetching and the imports lock -- all HTTP calls mocked."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from chainvet.exceptions import ImportFetchError
from chainvet.store.documents import ImportSpec
from chainvet.store.imports import fetch_all, fetch_import, refresh_imports

PEER_LEDGER = (
    "criteria:\n"
    "  peer-reviewed: {description: Reviewed by a peer}\n"
    "audits:\n"
    "  third-party1:\n"
    "    - version: 10.0.0\n"
    "      criteria: peer-reviewed\n"
)


def _patch_fetch_text(**kwargs):
    """Patch the HTTP fetch used by the import layer."""
    return patch("chainvet.store.imports.fetch_text", new_callable=AsyncMock, **kwargs)


class TestFetchImport:
    """Fetching a single import."""

    def test_url_import(self, tmp_path: Path) -> None:
        with _patch_fetch_text(return_value=PEER_LEDGER) as mock_fetch:
            data = asyncio.run(
                fetch_import(ImportSpec("peer", url="https://example.com/a.yaml"), tmp_path)
            )
        mock_fetch.assert_awaited_once_with("https://example.com/a.yaml")
        assert "third-party1" in data["audits"]

    def test_path_import(self, tmp_path: Path) -> None:
        (tmp_path / "peer.yaml").write_text(PEER_LEDGER)
        data = asyncio.run(fetch_import(ImportSpec("peer", path="peer.yaml"), tmp_path))
        assert "peer-reviewed" in data["criteria"]

    def test_invalid_yaml_from_url(self, tmp_path: Path) -> None:
        with _patch_fetch_text(return_value="audits: [unclosed"):
            with pytest.raises(ImportFetchError, match="Import 'peer'"):
                asyncio.run(
                    fetch_import(ImportSpec("peer", url="https://example.com"), tmp_path)
                )

    def test_malformed_ledger(self, tmp_path: Path) -> None:
        bad = "audits:\n  x:\n    - version: 1.0.0\n"
        with _patch_fetch_text(return_value=bad):
            with pytest.raises(ImportFetchError, match="missing 'criteria'"):
                asyncio.run(
                    fetch_import(ImportSpec("peer", url="https://example.com"), tmp_path)
                )

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ImportFetchError, match="Cannot read"):
            asyncio.run(fetch_import(ImportSpec("peer", path="nope.yaml"), tmp_path))

    def test_http_failure_propagates(self, tmp_path: Path) -> None:
        with _patch_fetch_text(side_effect=ImportFetchError("HTTP 404 fetching u")):
            with pytest.raises(ImportFetchError, match="HTTP 404"):
                asyncio.run(
                    fetch_import(ImportSpec("peer", url="https://example.com"), tmp_path)
                )


class TestRefresh:
    """Fetching everything and writing the lock."""

    def test_fetch_all_keyed_by_name(self, tmp_path: Path) -> None:
        specs = [
            ImportSpec("b", url="https://example.com/b"),
            ImportSpec("a", url="https://example.com/a"),
        ]
        with _patch_fetch_text(return_value=PEER_LEDGER):
            result = asyncio.run(fetch_all(specs, tmp_path))
        assert sorted(result) == ["a", "b"]

    def test_refresh_writes_lock(self, tmp_path: Path) -> None:
        lock = tmp_path / "supply-chain" / "imports.lock.yaml"
        with _patch_fetch_text(return_value=PEER_LEDGER):
            names = refresh_imports(
                [ImportSpec("peer", url="https://example.com/a.yaml")], tmp_path, lock
            )
        assert names == ["peer"]
        written = yaml.safe_load(lock.read_text())
        assert written["peer"]["audits"]["third-party1"][0]["criteria"] == "peer-reviewed"

    def test_one_failure_fails_refresh(self, tmp_path: Path) -> None:
        lock = tmp_path / "imports.lock.yaml"
        with _patch_fetch_text(side_effect=ImportFetchError("boom")):
            with pytest.raises(ImportFetchError):
                refresh_imports([ImportSpec("peer", url="u")], tmp_path, lock)
        assert not lock.exists()
