# powcommit/cli/main.py
"""
CLI for creating, verifying and inspecting proof-of-work commits.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from powcommit.commit.assembler import create_commit
from powcommit.config import ENV_PRIVATE_KEY, MiningSettings
from powcommit.core.canon import compact_json
from powcommit.core.errors import CommitCreationFailed
from powcommit.core.types import COMMIT_TYPES
from powcommit.crypto.hashing import commit_digest
from powcommit.crypto.keys import create_identity
from powcommit.verify.verifier import CommitVerifier

app = typer.Typer(
    name="powcommit",
    help="Create, verify and inspect signed proof-of-work commits",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def load_commits(path: Path) -> List[Any]:
    """Read a single JSON commit, a JSON array of commits, or JSONL (one per line)."""
    text = path.read_text(encoding="utf-8")
    try:
        loaded = json.loads(text)
    except json.JSONDecodeError:
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    return loaded if isinstance(loaded, list) else [loaded]


def resolve_settings(difficulty: Optional[int], max_attempts: Optional[int] = None,
                     timeout: Optional[float] = None) -> MiningSettings:
    try:
        return MiningSettings.resolve(difficulty, max_attempts, timeout)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(2)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log mining and verification details"),
):
    """Signed, proof-of-work gated commits."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def identity():
    """Generate a new key pair and print it as JSON."""
    ident = create_identity()
    typer.echo(json.dumps({"privateKey": ident.private_key, "publicKey": ident.public_key}, indent=2))


@app.command()
def commit(
    payload_file: Path = typer.Argument(..., help="JSON file holding the payload object"),
    type: str = typer.Option(..., "--type", "-t", help="post | meta | message"),
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar=ENV_PRIVATE_KEY, help="Hex private key"),
    difficulty: Optional[int] = typer.Option(None, "--difficulty", "-d", help="Leading zero nibbles"),
    max_attempts: Optional[int] = typer.Option(None, "--max-attempts", help="Give up after this many hashes"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Give up after this many seconds"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Append the commit to this JSONL file"),
):
    """Mine and sign a commit for a payload."""
    if type not in COMMIT_TYPES:
        console.print(f"[red]Unknown type '{type}' (expected one of: {', '.join(COMMIT_TYPES)})[/]")
        raise typer.Exit(2)
    if not key:
        console.print(f"[red]No private key: pass --key or set {ENV_PRIVATE_KEY}[/]")
        raise typer.Exit(2)
    if not payload_file.exists():
        console.print(f"[red]Payload file not found: {payload_file}[/]")
        raise typer.Exit(1)

    try:
        payload = json.loads(payload_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Payload is not valid JSON: {e}[/]")
        raise typer.Exit(1)
    if not isinstance(payload, dict):
        console.print("[red]Payload must be a JSON object[/]")
        raise typer.Exit(1)

    settings = resolve_settings(difficulty, max_attempts, timeout)

    try:
        created = create_commit(
            key,
            payload,
            type,
            settings.difficulty,
            max_attempts=settings.max_attempts,
            timeout=settings.timeout,
        )
    except (CommitCreationFailed, ValueError) as e:
        console.print(f"[red]Commit creation failed: {e}[/]")
        raise typer.Exit(1)

    line = compact_json(created.to_dict())
    if output is None:
        typer.echo(line)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "a", encoding="utf-8") as f:
        f.write(line + "\n")
    console.print(f"[green]Appended {type} commit (nonce {created.nonce}) to {output}[/]")


@app.command()
def verify(
    file: Path = typer.Argument(..., help="JSON or JSONL file of commits"),
    difficulty: Optional[int] = typer.Option(None, "--difficulty", "-d", help="Required leading zero nibbles"),
    trusted: Optional[List[str]] = typer.Option(None, "--trusted", help="Accept only these public keys (repeatable)"),
):
    """Verify schema, proof of work and signatures of every commit in a file."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/]")
        raise typer.Exit(1)

    try:
        commits = load_commits(file)
    except json.JSONDecodeError as e:
        console.print(f"[red]Failed to parse {file}: {e}[/]")
        raise typer.Exit(1)

    settings = resolve_settings(difficulty)
    try:
        verifier = CommitVerifier(settings.difficulty, trusted_keys=trusted or None)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(2)

    result = verifier.verify_all(commits)

    if result.is_valid:
        console.print(f"[green]✓ {file} is valid[/]")
        console.print(f"  {result.message}")
    else:
        console.print(f"[red]✗ Verification failed for {file}[/]")
        for failure in result.failures:
            console.print(f"  • [{failure.index}] {failure.category}: {failure.message}")
        raise typer.Exit(1)


@app.command()
def inspect(
    file: Path = typer.Argument(..., help="JSON or JSONL file of commits"),
):
    """Show commits in a table with their digests."""
    if not file.exists():
        console.print(f"[red]File not found: {file}[/]")
        raise typer.Exit(1)

    try:
        commits = load_commits(file)
    except json.JSONDecodeError as e:
        console.print(f"[red]Failed to parse {file}: {e}[/]")
        raise typer.Exit(1)

    if not commits:
        console.print("[yellow]No commits found.[/]")
        return

    table = Table(title=f"Commits in {file.name}")
    table.add_column("#")
    table.add_column("Type")
    table.add_column("Commit At")
    table.add_column("Nonce")
    table.add_column("Digest")
    table.add_column("Author")

    for i, c in enumerate(commits):
        if not isinstance(c, dict):
            table.add_row(str(i), "—", "—", "—", "—", "—")
            continue
        try:
            digest_hex = commit_digest(c["data"], c["commitAt"], c["nonce"])
        except (KeyError, TypeError, ValueError):
            digest_hex = "—"
        table.add_row(
            str(i),
            str(c.get("type", "—")),
            str(c.get("commitAt", "—")),
            str(c.get("nonce", "—")),
            digest_hex[:16],
            str(c.get("publicKey", "—"))[:18],
        )

    console.print(table)


if __name__ == "__main__":
    app()
