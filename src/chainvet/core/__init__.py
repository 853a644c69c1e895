"""Core resolution engine: criteria, dependency graph, ledger, and resolver."""
