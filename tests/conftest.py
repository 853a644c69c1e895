"""Shared fixtures for chainvet tests.

The "simple" workspace used throughout mirrors a typical small project::

    root-package (first-party, root)
      -> first-party (first-party)
           -> third-party1 -> transitive-third-party1
           -> third-party2

Every package is at version 10.0.0 and ``reviewed`` is the only default
criteria.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Callable

import pytest
import yaml

from chainvet.core.criteria import CriteriaEntry, CriteriaSet
from chainvet.core.graph import DependencyGraph, Package

REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"
DEFAULT_VERSION = "10.0.0"
THIRD_PARTIES = ["third-party1", "third-party2", "transitive-third-party1"]


def _fake_path(name: str) -> str:
    return f"path+file:///C:/FAKE/{name}"


@pytest.fixture
def criteria() -> CriteriaSet:
    """``strong-reviewed -> reviewed -> weak-reviewed``; ``reviewed`` is default."""
    return CriteriaSet([
        CriteriaEntry("weak-reviewed"),
        CriteriaEntry("reviewed", frozenset({"weak-reviewed"}), is_default=True),
        CriteriaEntry("strong-reviewed", frozenset({"reviewed"})),
    ])


@pytest.fixture
def simple_graph() -> DependencyGraph:
    """The five-package simple workspace."""
    graph = DependencyGraph()
    root = Package("root-package", DEFAULT_VERSION, _fake_path("root-package"),
                   is_first_party=True, is_root=True)
    first = Package("first-party", DEFAULT_VERSION, _fake_path("first-party"),
                    is_first_party=True)
    tp1 = Package("third-party1", DEFAULT_VERSION, REGISTRY)
    tp2 = Package("third-party2", DEFAULT_VERSION, REGISTRY)
    ttp1 = Package("transitive-third-party1", DEFAULT_VERSION, REGISTRY)
    for pkg in (root, first, tp1, tp2, ttp1):
        graph.add_package(pkg)
    graph.add_dependency(root, first)
    graph.add_dependency(first, tp1)
    graph.add_dependency(first, tp2)
    graph.add_dependency(tp1, ttp1)
    return graph


@pytest.fixture
def simple_graph_doc() -> dict[str, Any]:
    """The simple workspace as a graph document."""
    def pid(name: str, first_party: bool = False) -> str:
        origin = _fake_path(name) if first_party else REGISTRY
        return f"{name} {DEFAULT_VERSION} ({origin})"

    packages = [
        {"name": "root-package", "version": DEFAULT_VERSION,
         "origin": _fake_path("root-package"), "first_party": True, "root": True},
        {"name": "first-party", "version": DEFAULT_VERSION,
         "origin": _fake_path("first-party"), "first_party": True},
    ] + [
        {"name": name, "version": DEFAULT_VERSION, "origin": REGISTRY}
        for name in THIRD_PARTIES
    ]
    edges = [
        {"from": pid("root-package", True), "to": pid("first-party", True)},
        {"from": pid("first-party", True), "to": pid("third-party1")},
        {"from": pid("first-party", True), "to": pid("third-party2")},
        {"from": pid("third-party1"), "to": pid("transitive-third-party1")},
    ]
    return {"packages": packages, "edges": edges}


@pytest.fixture
def ledger_doc() -> dict[str, Any]:
    """An audits.yaml document with criteria and no audits."""
    return {
        "criteria": {
            "weak-reviewed": {"description": "Skimmed"},
            "reviewed": {
                "description": "Read every line",
                "implies": "weak-reviewed",
                "default": True,
            },
            "strong-reviewed": {"implies": ["reviewed"]},
        },
        "audits": {},
    }


@pytest.fixture
def write_store(
    tmp_path: pathlib.Path, simple_graph_doc: dict[str, Any]
) -> Callable[..., tuple[pathlib.Path, pathlib.Path]]:
    """Factory writing a store directory and a graph file under ``tmp_path``.

    Returns ``(store_dir, graph_path)``.
    """
    def _write(
        audits: dict[str, Any] | None = None,
        config: dict[str, Any] | None = None,
        graph: dict[str, Any] | None = None,
    ) -> tuple[pathlib.Path, pathlib.Path]:
        store_dir = tmp_path / "supply-chain"
        store_dir.mkdir(exist_ok=True)
        if audits is not None:
            (store_dir / "audits.yaml").write_text(yaml.safe_dump(audits))
        if config is not None:
            (store_dir / "config.yaml").write_text(yaml.safe_dump(config))
        graph_path = tmp_path / "graph.json"
        graph_path.write_text(json.dumps(graph if graph is not None else simple_graph_doc))
        return store_dir, graph_path

    return _write
