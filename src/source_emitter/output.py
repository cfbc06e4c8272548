"""Rich formatting and display for resolution results."""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from source_emitter.models import FullyQualified, QualifiedSuffix, RenderingDecision, StaticallyImported, Unqualified
from source_emitter.reference_collector import StaticMemberReference
from source_emitter.resolver import Resolution

DECISION_STYLES: dict[type, str] = {
    Unqualified: "green",
    StaticallyImported: "green",
    QualifiedSuffix: "yellow",
    FullyQualified: "red",
}


def _decision_text(decision: RenderingDecision) -> Text:
    return Text(decision.render(), style=DECISION_STYLES[type(decision)])


def format_imports_table(resolution: Resolution) -> Table:
    """Create Rich table listing the import lines of a resolved file."""
    table = Table(title="Imports")

    table.add_column("Kind", style="magenta", no_wrap=True)
    table.add_column("Import", style="cyan")

    for line in resolution.static_import_lines():
        table.add_row("static", line)
    for line in resolution.type_import_lines():
        table.add_row("type", line)
    excluded = sorted(
        name.canonical_name
        for name in resolution.type_imports
        if name.package in resolution.excluded_import_packages
    )
    for line in excluded:
        table.add_row("implicit", Text(line, style="dim"))

    return table


def format_references_table(resolution: Resolution) -> Table:
    """Create Rich table showing how every reference is spelled."""
    table = Table(title="Reference Resolution")

    table.add_column("#", justify="right", style="magenta")
    table.add_column("Scope", style="cyan", no_wrap=True)
    table.add_column("Reference")
    table.add_column("Rendering")
    table.add_column("Decision", style="dim")

    for ref in resolution.references:
        if isinstance(ref, StaticMemberReference):
            target = f"{ref.owner}.{ref.member}"
        else:
            target = ref.name.canonical_name
        scope = ref.scope.qualified_name.canonical_name if ref.scope.qualified_name else "<file>"
        if ref.in_header:
            scope += " (header)"
        decision = resolution.decision_for(ref)
        table.add_row(str(ref.index), scope, target, _decision_text(decision), type(decision).__name__)

    return table


def print_summary_stats(console: Console, resolution: Resolution) -> None:
    """Print summary statistics about the resolution."""
    if not resolution.references:
        console.print("[yellow]No references found.[/yellow]")
        return

    qualified = sum(1 for d in resolution.decisions if isinstance(d, FullyQualified))
    console.print("\n[bold]Summary:[/bold]")
    console.print(f"References resolved: {len(resolution.references)}")
    console.print(f"Type imports: {len(resolution.type_import_lines())}")
    console.print(f"Static imports: {len(resolution.static_import_lines())}")
    console.print(f"Fully qualified references: {qualified}")


def display_resolution(console: Console, resolution: Resolution) -> None:
    """Display imports, per-reference decisions and summary statistics."""
    console.print(format_imports_table(resolution))
    if resolution.references:
        console.print(format_references_table(resolution))
    print_summary_stats(console, resolution)
