"""chainvet: Audit-ledger based supply chain verification for dependency graphs."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
