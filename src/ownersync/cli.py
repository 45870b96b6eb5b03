"""ownersync CLI — Typer application with init, show, check, sync, and clear commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ownersync import __version__
from ownersync.config.loader import ConfigError, load_config, validate_config
from ownersync.config.schema import OwnersyncConfig
from ownersync.rules.loader import DesiredStateError, load_owners_files
from ownersync.rules.models import OwnersFile

app = typer.Typer(
    name="ownersync",
    help="Keep CODEOWNERS files in sync through signed commits.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)

_FORMATS = ("terminal", "json")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; our client already logs at DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _fail(label: str, exc: Exception) -> typer.Exit:
    console.print(f"[bold red]{label}:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=2)


def _load(config: Optional[str]) -> OwnersyncConfig:
    """Load and validate config, exit 2 on failure."""
    try:
        cfg = load_config(Path.cwd(), config)
        validate_config(cfg)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc
    return cfg


def _load_desired(cfg: OwnersyncConfig, desired: Optional[str]) -> List[OwnersFile]:
    path = Path(desired or cfg.file.desired_state)
    try:
        return load_owners_files(path)
    except DesiredStateError as exc:
        raise _fail("Desired state error", exc) from exc


def _check_format(format: str) -> None:
    if format not in _FORMATS:
        console.print(f"[bold red]Invalid format:[/bold red] {format}")
        raise typer.Exit(code=2)


def _parse_repository(repository: str) -> tuple[str, str]:
    owner, sep, name = repository.partition("/")
    if not sep or not owner or not name:
        console.print(f"[bold red]Invalid repository:[/bold red] {repository} (expected owner/name)")
        raise typer.Exit(code=2)
    return owner, name


def _make_client(cfg: OwnersyncConfig):
    from ownersync.github.client import GitHubClient

    return GitHubClient(cfg.github.token, base_url=cfg.github.api_url, timeout=cfg.github.timeout)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .ownersync.toml and owners.yaml in the current directory."""
    from ownersync.config.defaults import DEFAULT_OWNERS_YAML, DEFAULT_TOML
    from ownersync.config.loader import CONFIG_FILENAME

    root = Path.cwd()
    targets = [(root / CONFIG_FILENAME, DEFAULT_TOML), (root / "owners.yaml", DEFAULT_OWNERS_YAML)]

    existing = [p for p, _ in targets if p.exists()]
    if existing:
        for p in existing:
            console.print(f"[yellow]⚠[/yellow]  {p.name} already exists at {p}")
        raise typer.Exit(code=1)

    for path, template in targets:
        path.write_text(template, encoding="utf-8")
        console.print(f"[green]✓[/green] Created {path}")


# ── show ──────────────────────────────────────────────────────────────────────


@app.command()
def show(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    branch: str = typer.Option("main", "--branch", "-b", help="Branch to read"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .ownersync.toml"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Print the owners file currently on a branch."""
    import json

    from ownersync.github.client import GitHubError
    from ownersync.output import terminal
    from ownersync.output.json_report import rules_to_list
    from ownersync.sync.engine import read_current

    _configure_logging(verbose)
    _check_format(format)
    owner, name = _parse_repository(repository)
    cfg = _load(config)
    target = OwnersFile(repository_owner=owner, repository_name=name, branch=branch)

    with _make_client(cfg) as api:
        try:
            current = read_current(api, target, cfg.file.path)
        except GitHubError as exc:
            raise _fail("GitHub error", exc) from exc

    if format == "json":
        print(json.dumps({"path": cfg.file.path, "rules": rules_to_list(current)}, indent=2))
    else:
        terminal.render_ruleset(current, f"{repository}@{branch}:{cfg.file.path}", console)


# ── check / sync ──────────────────────────────────────────────────────────────


def _run(config, desired, format, verbose, *, dry_run: bool, plan_only: bool):
    from ownersync.commit.builder import CommitError
    from ownersync.commit.signing import SigningError
    from ownersync.github.client import GitHubError
    from ownersync.output import json_report, terminal
    from ownersync.sync.engine import sync_all

    _configure_logging(verbose)
    _check_format(format)
    cfg = _load(config)
    files = _load_desired(cfg, desired)

    with _make_client(cfg) as api:
        try:
            report = sync_all(api, files, cfg, dry_run=dry_run, plan_only=plan_only)
        except GitHubError as exc:
            raise _fail("GitHub error", exc) from exc
        except SigningError as exc:
            raise _fail("Signing error", exc) from exc
        except CommitError as exc:
            raise _fail(f"Commit failed ({type(exc).__name__})", exc) from exc

    if format == "json":
        print(json_report.render(report))
    else:
        terminal.render(report, verbose=verbose, console=console)
    return report


@app.command()
def check(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .ownersync.toml"),
    desired: Optional[str] = typer.Option(None, "--desired", "-d", help="Path to the desired-state YAML"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Compare remote owners files with the desired state. Exit 1 on drift."""
    report = _run(config, desired, format, verbose, dry_run=True, plan_only=True)
    if report.drifted:
        raise typer.Exit(code=1)


@app.command()
def sync(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .ownersync.toml"),
    desired: Optional[str] = typer.Option(None, "--desired", "-d", help="Path to the desired-state YAML"),
    format: str = typer.Option("terminal", "--format", "-f", help="Output format: terminal | json"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be committed without committing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Commit every owners file that differs from the desired state."""
    _run(config, desired, format, verbose, dry_run=dry_run, plan_only=False)


# ── clear ─────────────────────────────────────────────────────────────────────


@app.command()
def clear(
    repository: str = typer.Argument(..., help="Repository as owner/name"),
    branch: str = typer.Option("main", "--branch", "-b", help="Branch to write"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .ownersync.toml"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Empty the owners file on a branch with a signed commit."""
    from ownersync.commit.builder import CommitError
    from ownersync.commit.signing import SigningError
    from ownersync.github.client import GitHubError
    from ownersync.sync.engine import clear_file

    _configure_logging(verbose)
    owner, name = _parse_repository(repository)
    cfg = _load(config)

    if not yes and not typer.confirm(f"Empty {cfg.file.path} on {repository}@{branch}?"):
        raise typer.Exit(code=1)

    target = OwnersFile(repository_owner=owner, repository_name=name, branch=branch)
    with _make_client(cfg) as api:
        try:
            result = clear_file(api, target, cfg)
        except GitHubError as exc:
            raise _fail("GitHub error", exc) from exc
        except SigningError as exc:
            raise _fail("Signing error", exc) from exc
        except CommitError as exc:
            raise _fail(f"Commit failed ({type(exc).__name__})", exc) from exc

    console.print(f"[green]✓[/green] Cleared {result.path} on {repository}@{branch} ({result.commit_sha})")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"ownersync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """ownersync — keep CODEOWNERS files in sync through signed commits."""
