#!/usr/bin/env python
"""
Fit robust Rasch difficulties to binary response data and save the result.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from robust_rasch.core.data import load_csv_to_response_matrix
from robust_rasch.core.errors import DataValidationError, PosteriorUnderflowError
from robust_rasch.irt.estimation.data_models import RobustAnalysisResult
from robust_rasch.irt.estimation.pipeline import estimate_robust_difficulties
from robust_rasch.irt.estimation.settings import EstimatorSettings

PROJECT_DIR = Path(__file__).parent.parent.absolute()
DEFAULT_OUTPUT_DIR = PROJECT_DIR / "data" / "fitted-models"

console = Console(force_terminal=True, legacy_windows=True)
app = typer.Typer()


def save_result(result: RobustAnalysisResult, output_path: Path) -> None:
    """Save estimation result to json file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(result.model_dump_json(indent=4))


def print_difficulty_table(result: RobustAnalysisResult) -> None:
    """Pretty-print all difficulty estimates side by side."""
    table = Table(title="Item Difficulties")
    table.add_column("Item", style="bold")
    table.add_column("MMLE", justify="right")
    table.add_column(f"DPD (β={result.dpd.hyperparameter:g})", justify="right")
    table.add_column(
        f"Gamma (γ={result.gamma.hyperparameter:g})", justify="right"
    )
    if result.weighted_mmle is not None:
        table.add_column("Weighted MMLE", justify="right")

    for j in range(result.mmle.n_items):
        row = [
            str(j + 1),
            f"{result.mmle.difficulties[j]:.4f}",
            f"{result.dpd.difficulties[j]:.4f}",
            f"{result.gamma.difficulties[j]:.4f}",
        ]
        if result.weighted_mmle is not None:
            row.append(f"{result.weighted_mmle.difficulties[j]:.4f}")
        table.add_row(*row)

    console.print(table)


@app.command()
def main(
    input_path: Path = typer.Argument(
        ...,
        help="Path to CSV file with responses (columns: examinee_id, response_string)",
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "-o",
        "--output-dir",
        help="Output directory for the estimation result",
    ),
    weighted: bool = typer.Option(
        False,
        "--weighted",
        help="Also fit the person-fit weighted MMLE comparison estimate",
    ),
) -> None:
    """Fit MMLE, DPD and gamma-divergence difficulties and save as JSON."""

    if not input_path.exists():
        console.print(f"[red]File not found: {input_path}[/red]")
        raise typer.Exit(1)
    if input_path.suffix != ".csv":
        console.print("[red]Only .csv files are supported[/red]")
        raise typer.Exit(1)

    # Estimation settings come from ROBUST_RASCH_* environment variables
    try:
        config = EstimatorSettings().to_config()
    except ValueError as e:
        console.print(f"[red]Invalid settings: {e}[/red]")
        raise typer.Exit(1) from e

    console.print("[dim]Loading data...[/dim]")
    try:
        _, data = load_csv_to_response_matrix(input_path)
    except DataValidationError as e:
        console.print(f"[red]Error loading CSV: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(
        Panel(
            f"[bold]Robust Rasch Estimation[/bold]\n\n"
            f"Input: [cyan]{input_path}[/cyan]\n"
            f"Examinees: [cyan]{data.n_examinees}[/cyan]\n"
            f"Items: [cyan]{data.n_items}[/cyan]\n"
            f"β / γ: [cyan]{config.divergence.beta} / {config.divergence.gamma}[/cyan]\n"
            f"Quadrature points: [cyan]{config.quadrature.n_points}[/cyan]",
            title="Configuration",
        )
    )

    console.print("[dim]Fitting estimators...[/dim]")
    try:
        result = estimate_robust_difficulties(
            data, config, include_weighted=weighted
        )
    except PosteriorUnderflowError as e:
        console.print(f"[red]Numerical failure: {e}[/red]")
        raise typer.Exit(1) from e

    for name, fitted in (("DPD", result.dpd), ("Gamma", result.gamma)):
        console.print(
            f"  {name}: {fitted.convergence_status.value} "
            f"({fitted.n_iterations} iterations, max |Δb|={fitted.max_change:.2e})"
        )

    print_difficulty_table(result)

    output_path = output_dir / f"{input_path.stem}.json"
    save_result(result, output_path)

    console.print(
        Panel(
            f"[bold green]Result saved[/bold green]\n\n"
            f"Output: [cyan]{output_path}[/cyan]",
            title="Done",
        )
    )


if __name__ == "__main__":
    app()
