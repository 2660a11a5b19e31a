"""RAI CLI: inspect text with the guardrails and run the demo backend."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rai import __version__

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """RAI: Responsible AI demo tooling.

    Runs the guardrail pipeline (injection detection, PII scrubbing, data
    classification) locally and serves the demo API.
    """


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.argument("text", required=False)
@click.option("--file", "-f", "path", type=click.Path(exists=True, dir_okay=False), help="Read text from a file")
def check(text: str | None, path: str | None):
    """Run every guardrail over TEXT and show what each one found."""
    from rai.guardrails import classify_data, detect_injection, is_destructive_command, scrub_pii

    if path:
        with open(path, encoding="utf-8") as fh:
            text = fh.read()
    if not text:
        raise click.UsageError("Provide TEXT or --file.")

    finding = detect_injection(text)
    redaction = scrub_pii(text)
    classification = classify_data(text)

    table = Table(title="Guardrail Results")
    table.add_column("Check", style="cyan")
    table.add_column("Result")
    table.add_column("Details")

    injection_style = "red" if finding.is_injection else "green"
    table.add_row(
        "Injection",
        f"[{injection_style}]{'DETECTED' if finding.is_injection else 'clean'}[/] ({finding.confidence.value})",
        ", ".join(finding.matched_patterns) or "-",
    )
    table.add_row(
        "PII / secrets",
        f"{redaction.redaction_count} redaction(s)",
        ", ".join(redaction.sorted_categories()) or "-",
    )
    table.add_row(
        "Classification",
        classification.classification.value,
        classification.reason,
    )
    table.add_row(
        "Destructive",
        "[yellow]flagged[/]" if is_destructive_command(text) else "no",
        "advisory only",
    )
    console.print(table)

    if redaction.redaction_count:
        console.print(Panel(Text(redaction.redacted_text), title="Redacted text", border_style="dim"))


# ── Scenarios ────────────────────────────────────────────────────────


@main.command()
def scenarios():
    """List the demo scenarios."""
    from rai.scenarios import SCENARIOS

    table = Table(title=f"Scenarios ({len(SCENARIOS)})")
    table.add_column("ID", style="dim", width=5)
    table.add_column("Title", style="cyan")
    table.add_column("Dimension")
    table.add_column("Scrubs PII", justify="center")
    table.add_column("Human review", justify="center")

    for s in SCENARIOS:
        table.add_row(
            s.id,
            s.title,
            s.dimension,
            "yes" if s.scrubs_pii else "",
            "yes" if s.requires_human_review else "",
        )
    console.print(table)


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the demo API with uvicorn."""
    import uvicorn

    console.print(f"\n[bold blue]RAI[/] serving on http://{host}:{port}\n")
    uvicorn.run("web.backend.app.main:app", host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    main()
