"""Resolution engine: requirement propagation, reachability, adjudication.

Submodules:
    models       -- Verdict, ProofMethod, CriteriaProof, Diagnostic, SolverResult
    propagation  -- RequirementPropagator (top-down required criteria)
    solver       -- ReachabilitySolver (audit-chain search per criteria)
    adjudicator  -- Adjudicator (violation precedence, exemption hygiene)
    report       -- Report, VerdictRecord, RemovableExemption
    engine       -- AuditResolver / resolve() (the whole pipeline)

All public names are re-exported here so that callers can write
``from chainvet.core.resolver import resolve, Verdict``.
"""

from chainvet.core.resolver.adjudicator import Adjudication, Adjudicator
from chainvet.core.resolver.engine import AuditResolver, resolve
from chainvet.core.resolver.models import (
    CriteriaProof,
    Diagnostic,
    ProofMethod,
    SolverResult,
    Verdict,
)
from chainvet.core.resolver.propagation import RequirementMap, RequirementPropagator
from chainvet.core.resolver.report import RemovableExemption, Report, VerdictRecord
from chainvet.core.resolver.solver import ReachabilitySolver

__all__ = [
    "Adjudication",
    "Adjudicator",
    "AuditResolver",
    "CriteriaProof",
    "Diagnostic",
    "ProofMethod",
    "ReachabilitySolver",
    "RemovableExemption",
    "Report",
    "RequirementMap",
    "RequirementPropagator",
    "SolverResult",
    "Verdict",
    "VerdictRecord",
    "resolve",
]
