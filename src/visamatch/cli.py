"""Typer CLI entrypoint for the matching pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, NoReturn, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .core import MalformedJobConstraintsError, UnknownVisaCodeError
from .logging import configure_logging
from .pipeline import AuditLogger, OutputWriter, PostingLoader, VisaProfileLoader
from .schemas.config import load_config

app = typer.Typer(help="Visa/job eligibility matching CLI.")


def _load_settings(config: Path | None) -> dict[str, Any]:
    if not config:
        return {}
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    try:
        return load_config(loaded).to_settings()
    except (TypeError, ValidationError) as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_hint="--config") from exc


def _input_error(exc: Exception) -> NoReturn:
    typer.echo(f"Invalid input file: {exc}", err=True)
    raise typer.Exit(code=3) from exc


@app.command()
def jobs(
    visa: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Visa profile JSON path."),
    postings: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Postings JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    catalog_defaults: bool = typer.Option(False, help="Fill absent visa attributes from the catalog."),
    eligible_only: bool = typer.Option(False, help="Drop blocked and failed postings from the output."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    console_logs: bool = typer.Option(False, help="Render logs for the console instead of JSON."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """List postings a visa holder may apply to."""
    settings = _load_settings(config)
    configure_logging(log_level, json_output=not console_logs)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        results = pipeline.run_jobs(
            visa_path=visa,
            postings_path=postings,
            output_path=output,
            use_catalog_defaults=catalog_defaults,
            eligible_only=eligible_only,
            audit_logger=audit_logger,
        )
    except UnknownVisaCodeError as exc:
        typer.echo(f"Visa not recognized, please re-verify: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        _input_error(exc)
    typer.echo(f"Matched {len(results)} postings. Results saved to {output}.")


@app.command()
def visas(
    posting: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Posting JSON path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    visa_code: Optional[List[str]] = typer.Option(None, "--visa-code", help="Restrict to these visa codes."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    console_logs: bool = typer.Option(False, help="Render logs for the console instead of JSON."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """List visa codes that may apply to a posting."""
    settings = _load_settings(config)
    configure_logging(log_level, json_output=not console_logs)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    try:
        report = pipeline.run_visas(
            posting_path=posting,
            output_path=output,
            visa_codes=visa_code or None,
            audit_logger=audit_logger,
        )
    except (KeyError, ValueError) as exc:
        _input_error(exc)
    summary = report["summary"]
    typer.echo(
        f"{summary['totalEligible']} eligible, {summary['totalConditional']} conditional, "
        f"{summary['totalBlocked']} blocked. Report saved to {output}."
    )


@app.command()
def evaluate(
    visa: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Visa profile JSON path."),
    posting: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Posting JSON path."),
    output: Optional[Path] = typer.Option(None, dir_okay=False, resolve_path=True, help="Output JSON path."),
    catalog_defaults: bool = typer.Option(False, help="Fill absent visa attributes from the catalog."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    console_logs: bool = typer.Option(False, help="Render logs for the console instead of JSON."),
) -> None:
    """Evaluate a single visa profile against a single posting."""
    settings = _load_settings(config)
    configure_logging(log_level, json_output=not console_logs)

    container = create_container(settings=settings)
    evaluator = container.evaluator()
    adapters = container.adapter_registry()
    verifications = container.verifications()

    try:
        profile = VisaProfileLoader(verifications).load(visa, use_catalog_defaults=catalog_defaults)
        job = PostingLoader(adapters).load_one(posting)
        result = evaluator.evaluate(profile, job)
    except UnknownVisaCodeError as exc:
        typer.echo(f"Visa not recognized, please re-verify: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except MalformedJobConstraintsError as exc:
        typer.echo(f"Unable to evaluate this posting: {exc}", err=True)
        raise typer.Exit(code=3) from exc
    except (KeyError, ValueError) as exc:
        _input_error(exc)

    payload = result.to_payload()
    if output:
        OutputWriter().write(output, payload)
    typer.echo(json.dumps(payload, ensure_ascii=False))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
