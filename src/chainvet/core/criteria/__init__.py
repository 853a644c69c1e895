"""Criteria definitions and the implication closure engine.

Public names are re-exported here so callers can write
``from chainvet.core.criteria import CriteriaSet``.
"""

from chainvet.core.criteria.closure import CriteriaEntry, CriteriaSet

__all__ = [
    "CriteriaEntry",
    "CriteriaSet",
]
