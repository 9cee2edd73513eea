import logging
import typer
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from expense_classifier.categorization import SuggestionEngine
from expense_classifier.categorization.categories import AUTO_ACCEPT_THRESHOLD
from expense_classifier.database.connection import DatabaseManager
from expense_classifier.domain.enums import ConfidenceLabel
from expense_classifier.domain.models import Category
from expense_classifier.parsers.factory import ParserFactory
from expense_classifier.repositories.dataframe_expense_updater import DataFrameExpenseUpdater
from expense_classifier.repositories.sqlite_pattern_store import SQLitePatternStore
from expense_classifier.services.reclassification_service import ReclassificationService

app = typer.Typer(
    name="expense-classifier",
    help="Suggest categories for institutional expenses and reclassify Miscellaneous items",
    add_completion=False,
)

console = Console()

LABEL_COLORS = {
    ConfidenceLabel.HIGH: "green",
    ConfidenceLabel.MEDIUM: "yellow",
    ConfidenceLabel.LOW: "red",
}


class State:
    verbose: bool = False
    store: Optional[SQLitePatternStore] = None
    engine: Optional[SuggestionEngine] = None


state = State()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    ),
    db_path: Path = typer.Option(
        Path("data/learned_patterns.db"),
        "--db",
        help="SQLite file holding learned patterns",
    ),
):
    """
    Expense Classifier - Suggest, learn and reclassify expense categories.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    if state.engine is None:
        store = SQLitePatternStore(DatabaseManager(db_path))
        store.ensure_schema()
        engine = SuggestionEngine()
        engine.load(store)
        state.store = store
        state.engine = engine

    state.verbose = verbose


def _fail(e: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {e}")
    if state.verbose:
        console.print_exception()
    raise typer.Exit(code=1)


def _load_categories(categories_file: Optional[Path]) -> List[Category]:
    """
    Categories from a file, or one category per catalog entry.

    Without a registry file every catalog category is treated as existing,
    with its name as id.
    """
    if categories_file is not None:
        return ParserFactory.create_parser(categories_file).parse_categories(categories_file)
    return [Category(id=name, name=name) for name in state.engine.catalog.category_names]


def _confidence_cell(confidence: float, label: ConfidenceLabel) -> str:
    color = LABEL_COLORS[label]
    return f"[{color}]{confidence:.0%} {label.value}[/{color}]"


@app.command(name="suggest")
def suggest(
    description: str = typer.Argument(..., help="Expense description"),
    notes: str = typer.Option("", "--notes", "-n", help="Expense notes"),
    categories_file: Optional[Path] = typer.Option(
        None,
        "--categories", "-c",
        help="CSV/JSON file with id, name, color columns",
        exists=True,
        dir_okay=False,
    ),
    limit: int = typer.Option(3, "--limit", "-l", min=1, help="Maximum suggestions"),
):
    """
    Suggest categories for one expense.

    Examples:
        expense-classifier suggest "WAPDA bijli bill March"
        expense-classifier suggest "Lunch for staff" --notes "seminar" -c categories.csv
    """
    try:
        state.engine.set_categories(_load_categories(categories_file))
        suggestions = state.engine.suggest(description, notes, limit=limit)

        if not suggestions:
            console.print(Panel(
                "[yellow]No category matched this text[/yellow]",
                title="No Suggestions",
                border_style="yellow"
            ))
            return

        table = Table(title=f"Suggestions for \"{description[:40]}\"")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Category", style="cyan")
        table.add_column("Confidence", justify="right")
        table.add_column("Auto-accept", justify="center")

        for rank, s in enumerate(suggestions, start=1):
            table.add_row(
                str(rank),
                s.category_name,
                _confidence_cell(s.confidence, s.confidence_label),
                "[green]✓[/green]" if s.auto_accept else "",
            )

        console.print(table)

    except Exception as e:
        _fail(e)


@app.command(name="explain")
def explain(
    description: str = typer.Argument(..., help="Expense description"),
    notes: str = typer.Option("", "--notes", "-n", help="Expense notes"),
):
    """
    Show which keywords matched for every catalog category.

    Example:
        expense-classifier explain "register attendance sheet"
    """
    try:
        breakdowns = state.engine.explain(description, notes)
        if not breakdowns:
            console.print("[yellow]No catalog keyword matched[/yellow]")
            return

        for breakdown in breakdowns:
            table = Table(show_header=True, box=None, padding=(0, 2))
            table.add_column("Keyword", style="white")
            table.add_column("Match", style="magenta")
            table.add_column("Points", justify="right")

            for match in breakdown.matches:
                table.add_row(match.keyword, match.kind, f"{match.points:.2f}")

            console.print(Panel(
                table,
                title=(
                    f"[bold]{breakdown.category_name}[/bold] "
                    f"score {breakdown.score:.2f} (x{breakdown.multiplier:.1f})"
                ),
                border_style="cyan",
            ))

    except Exception as e:
        _fail(e)


@app.command(name="learn")
def learn(
    expenses_file: Path = typer.Argument(
        ...,
        help="CSV/JSON file of categorized expenses",
        exists=True,
        dir_okay=False,
    ),
):
    """
    Learn category terms from categorized expenses and save them.

    Example:
        expense-classifier learn expenses.csv
    """
    try:
        expenses = ParserFactory.create_parser(expenses_file).parse(expenses_file)
        added = state.engine.learn(expenses)
        state.engine.persist(state.store)

        if not added:
            console.print("[yellow]No new terms learned[/yellow]")
            return

        table = Table(title="Newly learned terms")
        table.add_column("Category", style="cyan")
        table.add_column("Terms", style="white")
        for category_name, terms in added.items():
            table.add_row(category_name, ", ".join(terms))

        console.print(table)
        console.print(f"[bold green]✓ Learned {sum(len(t) for t in added.values())} terms[/bold green]")

    except Exception as e:
        _fail(e)


@app.command(name="reclassify")
def reclassify(
    expenses_file: Path = typer.Argument(
        ...,
        help="CSV/JSON file with all expenses",
        exists=True,
        dir_okay=False,
    ),
    categories_file: Optional[Path] = typer.Option(
        None,
        "--categories", "-c",
        help="CSV/JSON file with id, name, color columns",
        exists=True,
        dir_okay=False,
    ),
    apply: bool = typer.Option(
        False,
        "--apply",
        help="Apply accepted suggestions and write the output file",
    ),
    min_confidence: float = typer.Option(
        AUTO_ACCEPT_THRESHOLD,
        "--min-confidence",
        min=0.0,
        max=1.0,
        help="Top confidence needed to apply a suggestion",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Where to write the reclassified expenses (CSV)",
    ),
):
    """
    Suggest new categories for Miscellaneous expenses.

    Learns from the already categorized expenses in the same file first.

    Examples:
        expense-classifier reclassify expenses.csv -c categories.csv
        expense-classifier reclassify expenses.csv -c categories.csv --apply -o fixed.csv
    """
    try:
        parser = ParserFactory.create_parser(expenses_file)
        state.engine.set_categories(_load_categories(categories_file))
        service = ReclassificationService(state.engine, store=state.store)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Analyzing expenses...", total=None)
            expenses = parser.parse(expenses_file)
            summary = service.prepare(expenses)
            progress.update(task, completed=True)

        console.print(Panel.fit(str(summary), border_style="cyan"))

        if not summary.candidates:
            return

        table = Table(title="Reclassification candidates")
        table.add_column("ID", style="dim")
        table.add_column("Description", style="white", max_width=40)
        table.add_column("Amount", justify="right")
        table.add_column("Suggested", style="cyan")
        table.add_column("Confidence", justify="right")
        table.add_column("Alternatives", style="dim")

        for candidate in summary.candidates:
            top = candidate.top_suggestion
            expense = candidate.expense
            table.add_row(
                str(expense.id),
                expense.description[:40],
                f"{expense.amount:,.2f}" if expense.amount is not None else "",
                top.category_name,
                _confidence_cell(top.confidence, top.confidence_label),
                ", ".join(s.category_name for s in candidate.suggestions[1:]),
            )
        console.print(table)

        if not apply:
            console.print(f"[yellow]Preview only - rerun with --apply to reclassify[/yellow]")
            return

        output = output or expenses_file.with_name(f"{expenses_file.stem}.reclassified.csv")
        updater = DataFrameExpenseUpdater(
            parser.read_frame(expenses_file), state.engine.categories
        )
        result = service.apply(summary.candidates, updater, min_confidence=min_confidence)
        updater.save(output)

        console.print(f"[bold green]✓ Reclassified {result.applied_count} expenses[/bold green]")
        if result.skipped:
            console.print(f"[yellow]⏭️  {len(result.skipped)} left for manual review[/yellow]")
        if result.failed:
            console.print(f"[red]❌ {len(result.failed)} updates failed[/red]")
        console.print(f"Written to {output}")

    except Exception as e:
        _fail(e)


@app.command(name="patterns")
def patterns(
    category: Optional[str] = typer.Option(
        None,
        "--category",
        help="Only show this category",
    ),
):
    """
    Show the keyword catalog and learned terms.

    Example:
        expense-classifier patterns --category Utilities
    """
    try:
        learned = state.engine.learned_patterns

        table = Table(title=f"Pattern catalog v{state.engine.catalog.version}")
        table.add_column("Category", style="cyan", no_wrap=True)
        table.add_column("Weight", justify="right")
        table.add_column("Keywords", justify="right")
        table.add_column("Learned terms", style="magenta")

        for pattern in state.engine.catalog:
            if category and pattern.category_name.lower() != category.lower():
                continue
            table.add_row(
                pattern.category_name,
                f"{pattern.weight:.1f}",
                str(len(pattern.keywords)),
                ", ".join(learned.get(pattern.category_name, [])),
            )

        console.print(table)

        orphaned = [name for name in learned if name not in state.engine.catalog]
        if orphaned:
            console.print(
                f"\n[dim]Learned terms for categories outside the catalog "
                f"(not used for scoring): {', '.join(orphaned)}[/dim]"
            )

    except Exception as e:
        _fail(e)


@app.command(name="export-patterns")
def export_patterns(
    output: Optional[Path] = typer.Argument(None, help="File to write; prints if omitted"),
):
    """Export learned patterns as JSON"""
    data = state.engine.export_learned_patterns()
    if output is None:
        console.print_json(data)
        return

    output.write_text(data, encoding="utf-8")
    console.print(f"[green]✓[/green] Exported learned patterns to {output}")


@app.command(name="import-patterns")
def import_patterns(
    input_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON export to load"),
):
    """Replace learned patterns with a JSON export"""
    if not state.engine.import_learned_patterns(input_file.read_text(encoding="utf-8")):
        console.print(f"[bold red]Error:[/bold red] {input_file} is not a learned-pattern export")
        raise typer.Exit(code=1)

    state.engine.persist(state.store)
    console.print(f"[green]✓[/green] Imported learned patterns from {input_file}")


@app.command(name="reset-patterns")
def reset_patterns(
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
):
    """Forget every learned term"""
    if not yes:
        typer.confirm("Delete all learned patterns?", abort=True)

    state.engine.reset_learned_patterns()
    state.engine.persist(state.store)
    console.print("[green]✓[/green] Learned patterns cleared")


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
