"""Rich output formatting helpers for the chainvet CLI.

Provides consistent, verdict-colored terminal output for resolution reports,
recommendations, and criteria listings.

Verdict Color Mapping:
    FORBIDDEN = bold red, UNCERTIFIABLE = yellow, EXEMPTED = cyan,
    CERTIFIED = bold green
"""

from __future__ import annotations

from collections.abc import Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chainvet.core.resolver import Report, Verdict

_VERDICT_STYLES: dict[Verdict, str] = {
    Verdict.FORBIDDEN: "bold red",
    Verdict.UNCERTIFIABLE: "yellow",
    Verdict.EXEMPTED: "cyan",
    Verdict.CERTIFIED: "bold green",
}

console = Console()


def verdict_style(verdict: Verdict) -> str:
    """Return the Rich style string for a given verdict."""
    return _VERDICT_STYLES.get(verdict, "white")


def print_report(report: Report) -> None:
    """Print the per-package verdict table followed by the summary line.

    Args:
        report: The resolution report.
    """
    if not report.records:
        console.print("[dim]No packages in use.[/dim]")
        return

    table = Table(title="chainvet Results", show_header=True, header_style="bold")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Verdict", justify="center")
    table.add_column("Criteria", style="dim")
    table.add_column("Evidence")

    for record in report.records:
        verdict = Text(record.verdict.name, style=verdict_style(record.verdict))
        if record.diagnostic is not None and record.diagnostic.violation:
            evidence = record.diagnostic.violation
        elif record.diagnostic is not None:
            evidence = f"missing: {', '.join(record.diagnostic.failed_criteria)}"
        else:
            evidence = ", ".join(sorted({p.method.value for p in record.proofs})) or "-"
            if record.imported_evidence:
                evidence += " (imported)"
        table.add_row(
            record.name,
            record.version,
            verdict,
            ", ".join(record.required_criteria) or "-",
            evidence,
        )

    console.print(table)
    for record in report.records:
        for warning in record.warnings:
            console.print(f"[yellow]warning:[/yellow] {warning}")
    _print_summary(report)


def _print_summary(report: Report) -> None:
    """Print a one-line summary after the results table."""
    counts = report.summary()
    parts = [f"[bold]{counts['total']}[/bold] packages checked"]
    for verdict in Verdict:
        n = counts[verdict.value]
        if n:
            style = verdict_style(verdict)
            parts.append(f"[{style}]{n} {verdict.value}[/{style}]")
    console.print(" | ".join(parts))


def print_recommendations(report: Report) -> None:
    """Print audits to perform and exemptions that can be dropped."""
    if report.forbidden:
        console.print(Panel("[bold red]Forbidden packages[/bold red]", title="Violations"))
        for record in report.forbidden:
            reason = record.diagnostic.violation if record.diagnostic else ""
            console.print(f"  [red]- {record.name}@{record.version}: {reason}[/red]")

    needs_audit = report.needs_audit
    removable = report.removable_exemptions
    if not needs_audit and not removable:
        console.print("[green]Nothing to do. All packages are vetted.[/green]")
        return

    if needs_audit:
        table = Table(title="Recommended Audits", show_header=True)
        table.add_column("Package", style="bold")
        table.add_column("Audit")
        table.add_column("Criteria")
        for record in needs_audit:
            diag = record.diagnostic
            table.add_row(
                record.name,
                diag.suggested_audit if diag else f"full {record.version}",
                ", ".join(diag.failed_criteria) if diag else "",
            )
        console.print(table)

    if removable:
        table = Table(title="Removable Exemptions", show_header=True)
        table.add_column("Package", style="bold")
        table.add_column("Version")
        table.add_column("Reason")
        table.add_column("Suggest", justify="center")
        for entry in removable:
            table.add_row(
                entry.package, entry.version, entry.reason, "yes" if entry.suggest else "no"
            )
        console.print(table)


def print_criteria(closures: Mapping[str, frozenset[str]], defaults: frozenset[str]) -> None:
    """Print every criteria with its implication closure."""
    table = Table(title="Criteria", show_header=True)
    table.add_column("Name", style="bold")
    table.add_column("Default", justify="center")
    table.add_column("Implies")
    for name in sorted(closures):
        implied = sorted(closures[name] - {name})
        table.add_row(name, "yes" if name in defaults else "", ", ".join(implied) or "-")
    console.print(table)

