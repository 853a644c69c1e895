"""chainvet exception hierarchy.

All public exceptions inherit from ChainVetError, giving callers a single
base class to catch when they want to handle any chainvet-specific failure
without swallowing unrelated errors.

Per-package outcomes (Uncertifiable, Forbidden) are never exceptions: they
are ordinary verdict values collected into the report.
"""


class ChainVetError(Exception):
    """Base exception for all chainvet errors."""


class ConfigError(ChainVetError):
    """Raised when the configuration cannot be used for resolution.

    Configuration errors are fatal: they abort the run before any
    per-package verdict is produced and are surfaced as one diagnostic.
    """


class CriteriaCycleError(ConfigError):
    """Raised when the criteria implication graph contains a cycle.

    Attributes:
        cycle: The criteria names forming the cycle, first name repeated
            at the end (e.g. ["a", "b", "a"]).
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(
            "Cyclic criteria implication: " + " -> ".join(cycle)
        )


class UnknownCriteriaError(ConfigError):
    """Raised when a policy, audit, or exemption names an undefined criteria."""


class PolicyError(ConfigError):
    """Raised when a policy override is inconsistent with the dependency graph.

    Covers overrides for packages that are not first-party and
    ``dependency-criteria`` entries naming packages that are not actual
    dependencies of the policy's package.
    """


class DependencyCycleError(ConfigError):
    """Raised when the in-use dependency graph is not acyclic."""


class DocumentError(ChainVetError):
    """Raised when an input document is unreadable or malformed.

    Covers missing files, invalid YAML/JSON, and entries whose shape does
    not match the expected schema.
    """


class ImportFetchError(ChainVetError):
    """Raised when an imported audit ledger cannot be fetched or parsed."""
