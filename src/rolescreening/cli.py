"""Typer CLI entrypoint for the scoring pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml

from .container import create_container
from .errors import InvalidRoleConfigError
from .llm import HTTPLLMClient
from .logging import configure_logging
from .pipeline import AuditLogger, RoleLoader
from .schemas.config import load_config

app = typer.Typer(help="Candidate scoring CLI.")


@app.command()
def score(
    role: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Role config (JSON or YAML)."),
    evidence: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Candidate evidence JSONL path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
    llm_endpoint: Optional[str] = typer.Option(None, help="Evidence extraction API endpoint."),
    llm_api_key: Optional[str] = typer.Option(None, help="Evidence extraction API key."),
) -> None:
    """Score every candidate in the evidence file against one role."""
    settings: dict = {}
    if config:
        with config.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        try:
            settings = load_config(loaded).to_settings()
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--config") from exc

    configure_logging(log_level)

    try:
        pipeline = create_container(settings=settings).pipeline()
    except (TypeError, ValueError) as exc:
        raise typer.BadParameter(f"Invalid scoring settings: {exc}", param_hint="--config") from exc
    audit_logger = AuditLogger(audit_log) if audit_log else None
    extractor = HTTPLLMClient(llm_endpoint, llm_api_key) if llm_endpoint else None

    try:
        results = pipeline.run(
            role_path=role,
            evidence_path=evidence,
            output_path=output,
            audit_logger=audit_logger,
            extractor=extractor,
        )
    except InvalidRoleConfigError as exc:
        typer.echo("Invalid role configuration:", err=True)
        for message in exc.errors:
            typer.echo(f"  - {message}", err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(f"Processed {len(results)} candidates. Results saved to {output}.")


@app.command("validate-role")
def validate_role(
    role: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Role config (JSON or YAML)."),
) -> None:
    """Validate a role configuration without scoring anything."""
    try:
        loaded = RoleLoader().load(role)
    except InvalidRoleConfigError as exc:
        typer.echo("Invalid role configuration:", err=True)
        for message in exc.errors:
            typer.echo(f"  - {message}", err=True)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(
        f"Role {loaded.role_id or loaded.title or role.name} is valid: "
        f"{len(loaded.skills)} skills, {len(loaded.questions)} questions."
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
