from __future__ import annotations

import base64
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ..auth import register_user
from ..config import AppConfig, load_config
from ..jobs import JobInfrastructureError, JobNotFoundError, JobRequestError
from ..models import FileSubmission
from ..registry import UnsupportedFormatError
from ..service import build_services
from ..store import StoreUnavailableError

console = Console()

app = typer.Typer(help="Multi-backend file conversion toolkit")

LOCAL_OWNER = "local"


def _load_config(path: Path | None) -> AppConfig:
    return load_config(path)


def _submission_for(path: Path) -> FileSubmission:
    try:
        payload = path.read_bytes()
    except OSError as exc:
        console.print(f"[red]Cannot read[/red] {path}: {exc}")
        raise typer.Exit(1) from exc
    return FileSubmission(name=path.name, content=base64.b64encode(payload).decode("ascii"))


@app.command()
def formats(
    ext: str | None = typer.Argument(None, help="Show targets for a single source extension"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """List converters and the formats they handle."""
    services = build_services(_load_config(config))
    try:
        registry = services.registry
        if ext is None:
            table = Table(title="Converters")
            table.add_column("Converter")
            table.add_column("Inputs")
            table.add_column("Outputs")
            for descriptor in registry.all_backends():
                table.add_row(
                    descriptor.name,
                    ", ".join(sorted(descriptor.inputs)),
                    ", ".join(sorted(descriptor.outputs)),
                )
            console.print(table)
            return
        try:
            targets = registry.targets_for(ext)
        except UnsupportedFormatError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1) from exc
        table = Table(title=f"Targets for {ext}")
        table.add_column("Converter")
        table.add_column("Outputs")
        for name, outputs in targets["converterTargets"].items():
            table.add_row(name, ", ".join(outputs))
        console.print(table)
    finally:
        services.shutdown()


@app.command()
def convert(
    files: list[Path],
    to: str = typer.Option(..., "--to", help="Target format"),
    converter: str | None = typer.Option(None, "--converter", help="Force a specific converter"),
    owner: str = typer.Option(LOCAL_OWNER, "--owner", help="Owner the job is recorded under"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    submissions = [_submission_for(path) for path in files]
    services = build_services(_load_config(config))
    try:
        result = services.jobs.submit(owner, submissions, to, converter)
    except (JobRequestError, JobInfrastructureError, StoreUnavailableError) as exc:
        console.print(f"[red]Job failed[/red]: {exc}")
        raise typer.Exit(1) from exc
    finally:
        services.shutdown()

    table = Table(title=f"Job {result.job_id} ({result.status.value})")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Output / error")
    for item in result.results:
        colour = "green" if item.status == "completed" else "red"
        table.add_row(
            item.file_name,
            f"[{colour}]{item.status}[/{colour}]",
            item.output_file_name if item.status == "completed" else (item.error or "-"),
        )
    console.print(table)
    console.print(f"{result.completed_files} of {result.total_files} files converted.")
    if result.completed_files != result.total_files:
        raise typer.Exit(1)


@app.command()
def job(
    job_id: int,
    owner: str = typer.Option(LOCAL_OWNER, "--owner", help="Owner the job was recorded under"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Show a job and its per-file records."""
    services = build_services(_load_config(config))
    try:
        record, files = services.jobs.get_job(owner, job_id)
    except JobNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    finally:
        services.shutdown()

    console.print(f"Job {record.id}: {record.status.value}, {record.num_files} file(s), created {record.created_at:%Y-%m-%d %H:%M}")
    table = Table()
    table.add_column("Input")
    table.add_column("Output")
    table.add_column("Status")
    for item in files:
        table.add_row(item.input_file_name, item.output_file_name or "-", item.status)
    console.print(table)


@app.command("add-user")
def add_user(
    email: str,
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, confirmation_prompt=True),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Register an API user."""
    services = build_services(_load_config(config))
    try:
        user_id = register_user(services.store, email, password)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    finally:
        services.shutdown()
    console.print(f"[green]Created user[/green] {email} (id {user_id})")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from api.app import create_app

    cfg = _load_config(config)
    cfg.runtime.enable_local_api = True
    uvicorn.run(
        create_app(cfg),
        host=host or cfg.api.host,
        port=port or cfg.api.port,
        proxy_headers=True,
    )


if __name__ == "__main__":
    app()
