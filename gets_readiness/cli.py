"""
Command-line interface for the GETS Readiness Analyzer.

Provides the following commands:
- analyze: Score an invoice export (CSV or JSON) and write a JSON report
- schema: Show the GETS field catalogue
- rules: Show the business rules
"""

import json
from pathlib import Path
from typing import Optional

import typer

from .config import logger
from .gets_schema import GETS_SCHEMA, GETS_VERSION
from .loader import RowLoadError, load_rows
from .report import analyze_rows, format_report_text
from .rules import VALIDATION_RULES
from .schemas import Questionnaire


# Create Typer app
app = typer.Typer(
    name="gets-readiness",
    help="GETS e-invoicing readiness analyzer CLI",
    add_completion=False,
)


@app.command()
def analyze(
    input_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="Invoice export to analyse (CSV or JSON)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    report: Path = typer.Option(
        "readiness_report.json",
        "--report",
        "-r",
        help="Output readiness report JSON file path",
    ),
    webhooks: bool = typer.Option(False, "--webhooks", help="Webhooks are supported"),
    sandbox_env: bool = typer.Option(False, "--sandbox-env", help="A sandbox environment is available"),
    retries: bool = typer.Option(False, "--retries", help="Failed submissions are retried"),
    country: Optional[str] = typer.Option(None, "--country", help="Country the invoices are issued in"),
    erp: Optional[str] = typer.Option(None, "--erp", help="Source ERP system"),
    min_score: Optional[int] = typer.Option(
        None,
        "--min-score",
        min=0,
        max=100,
        help="Exit with non-zero status if the overall score is below this",
    ),
) -> None:
    """
    Analyse an invoice export for GETS readiness.

    Reads the export, measures field coverage, checks business rules,
    scores the result and writes the full report to a JSON file.
    """
    typer.echo(f"Analysing invoices from: {input_file}")

    try:
        rows = load_rows(input_file)
    except RowLoadError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if not rows:
        typer.echo("No rows found in input file.", err=True)
        raise typer.Exit(code=1)

    try:
        questionnaire = Questionnaire(webhooks=webhooks, sandbox_env=sandbox_env, retries=retries)
        readiness_report = analyze_rows(rows, questionnaire, country=country, erp=erp)

        with open(report, "w", encoding="utf-8") as f:
            json.dump(readiness_report.to_json_dict(), f, indent=2)
    except Exception as e:
        typer.echo(f"Error during analysis: {e}", err=True)
        logger.exception("Analysis failed")
        raise typer.Exit(code=1)

    typer.echo("\n" + format_report_text(readiness_report))
    typer.echo(f"\n[OK] Readiness report saved to: {report}")

    if min_score is not None and readiness_report.scores.overall < min_score:
        typer.echo(
            f"Overall score {readiness_report.scores.overall} is below the minimum of {min_score}",
            err=True,
        )
        raise typer.Exit(code=1)


@app.command()
def schema() -> None:
    """Show the GETS field catalogue."""
    typer.echo(f"GETS v{GETS_VERSION} fields:")
    for field in GETS_SCHEMA:
        marker = "required" if field.required else "optional"
        typer.echo(f"  {field.path:<24} {field.type.value:<8} {marker}")


@app.command()
def rules() -> None:
    """Show the business rules applied to every upload."""
    for rule in VALIDATION_RULES:
        typer.echo(f"  {rule.name.value:<18} {rule.description}")


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    typer.echo(f"GETS Readiness Analyzer v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
