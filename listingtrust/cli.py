"""CLI entry-point: analyze a listing URL or check raw product/policy text."""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console

from listingtrust.audit import build_insight, detect_contradictions, explain_flags
from listingtrust.config import get_settings
from listingtrust.extract import extract_claims, extract_policy
from listingtrust.pipeline import ListSink, analyze_product
from listingtrust.schemas.models import AnalyzeResult, Verdict

app = typer.Typer(help="Listing trust checker: product claims vs. merchant policies")

_VERDICT_STYLE = {
    Verdict.GOOD: "green",
    Verdict.CAUTION: "yellow",
    Verdict.RISK: "red",
    Verdict.UNCLEAR: "magenta",
}


def _print_result(console: Console, result: AnalyzeResult) -> None:
    style = _VERDICT_STYLE[result.verdict]
    console.print(f"Verdict: [{style}]{result.verdict.value}[/{style}]")
    for flag, sentence in zip(result.flags, result.explanations):
        console.print(f"  - {flag.value}: {sentence}")
    console.print(f"Product: {result.details.name}" + (f" ({result.details.price})" if result.details.price else ""))
    for finding in result.details.hidden_findings:
        console.print(f"  [yellow]! {finding}[/yellow]")
    if result.insight:
        console.print(f"[green]{result.insight.message}[/green]")
        console.print(result.insight.summary)
    console.print("Steps:")
    for step in result.steps:
        mark = "[green]done[/green]" if step.status == "done" else "[red]failed[/red]"
        timing = f" {step.duration_ms} ms" if step.duration_ms is not None else ""
        detail = f" ({step.detail})" if step.detail else ""
        console.print(f"  {step.name}: {mark}{timing}{detail}")
    console.print(f"Processed in {result.processing_ms} ms")


@app.command()
def analyze(
    url: str = typer.Argument(..., help="Product page URL"),
    live: bool = typer.Option(None, "--live/--offline", help="Override LISTINGTRUST_MODE"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw AnalyzeResult JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print progress events"),
):
    """Run the full pipeline for one product URL."""
    console = Console()
    settings = get_settings()
    if live is not None:
        settings.listingtrust_mode = "live" if live else "offline"

    sink = ListSink()
    result = asyncio.run(analyze_product(url, settings=settings, sink=sink))

    if verbose:
        for event in sink.events:
            console.print(f"[dim]{event.time} {event.name}: {event.message}[/dim]")
    if as_json:
        console.print_json(json.dumps(result.to_payload()))
    else:
        _print_result(console, result)
    if result.flags and result.flags[0].value in ("invalid_url", "analysis_failed"):
        raise typer.Exit(1)


def _read_text(text: str | None, path: str | None, label: str, console: Console) -> str:
    if path:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Error: cannot read {label} file: {e}[/red]")
            raise typer.Exit(1)
    return text or ""


@app.command()
def check(
    product_text: str = typer.Option(None, "--product-text", help="Product page text"),
    product_file: str = typer.Option(None, "--product-file", help="File with product page text"),
    policy_text: str = typer.Option(None, "--policy-text", help="Policy page text"),
    policy_file: str = typer.Option(None, "--policy-file", help="File with policy page text"),
):
    """Extract facts from raw texts and run the contradiction rules (no network)."""
    console = Console()
    product = _read_text(product_text, product_file, "product", console)
    policy_raw = _read_text(policy_text, policy_file, "policy", console)

    claims = extract_claims(product)
    policy = extract_policy(policy_raw)
    detection = detect_contradictions(claims, policy)

    console.print("Claims:")
    console.print_json(claims.model_dump_json(by_alias=True))
    console.print("Policy:")
    console.print_json(policy.model_dump_json(by_alias=True))
    style = _VERDICT_STYLE[detection.verdict]
    console.print(f"Verdict: [{style}]{detection.verdict.value}[/{style}]")
    for flag, sentence in zip(detection.flags, explain_flags(detection.flags)):
        console.print(f"  - {flag.value}: {sentence}")
    if not detection.flags:
        insight = build_insight(product, policy_raw, claims, policy)
        console.print(f"[green]{insight.message}[/green]")
        for pro in insight.pros:
            console.print(f"  + {pro}")
        for con in insight.cons:
            console.print(f"  - {con}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(None, help="Port (default from PORT / settings)"),
    reload: bool = typer.Option(False, help="Auto-reload on code changes"),
):
    """Run the FastAPI backend with uvicorn."""
    import uvicorn

    uvicorn.run("backend.main:app", host=host, port=port or get_settings().port, reload=reload)


if __name__ == "__main__":
    app()
