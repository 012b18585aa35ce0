"""
Command-line interface for cafe-intel.

Every command prints its result as JSON on stdout. Logs go to stderr.
"""

import asyncio
import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Optional

import typer

from cafe_intel.config import get_log_settings, setup_config
from cafe_intel.core import IntelAggregator
from cafe_intel.errors import CallerInputError, handle_api_error
from cafe_intel.logger import configure_logging


app = typer.Typer(help="cafe-intel - Verification & Threat Intelligence Aggregator")


def _serialize_response(obj):
    """Custom serializer for JSON output."""
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _to_jsonable(result):
    if is_dataclass(result):
        return asdict(result)
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


def _print_result(result) -> None:
    print(json.dumps(_to_jsonable(result), indent=2, default=_serialize_response))


def _run(operation) -> None:
    """Run one aggregator coroutine and print its result."""
    try:
        result = asyncio.run(operation)
    except CallerInputError as e:
        typer.echo(f"Error: {handle_api_error(e)}", err=True)
        raise typer.Exit(code=1)
    _print_result(result)


def _aggregator() -> IntelAggregator:
    return IntelAggregator()


@app.callback()
def main() -> None:
    """cafe-intel - Verification & Threat Intelligence Aggregator."""
    configure_logging(**get_log_settings())


@app.command()
def chat(message: str = typer.Argument(..., help="Message for the AI assistant")):
    """Ask the AI assistant."""
    _run(_aggregator().send_message(message))


@app.command()
def url(target: str = typer.Argument(..., help="URL to analyze")):
    """URL reputation."""
    _run(_aggregator().analyze_url(target))


@app.command()
def ip(address: str = typer.Argument(..., help="IP address to analyze")):
    """IP abuse reputation."""
    _run(_aggregator().analyze_ip(address))


@app.command()
def email(address: str = typer.Argument(..., help="Email address to analyze")):
    """Email heuristics."""
    _run(_aggregator().analyze_email(address))


@app.command()
def file(
    path: Path = typer.Argument(..., help="File to scan"),
    name_only: bool = typer.Option(False, "--name-only", help="Do not read or hash the file"),
):
    """File scan verdict by SHA-256."""
    content = None
    if not name_only:
        if not path.is_file():
            typer.echo(f"Error: {path} is not a readable file.", err=True)
            raise typer.Exit(code=1)
        content = path.read_bytes()
    _run(_aggregator().analyze_file(path.name, content))


@app.command()
def network(name: str = typer.Argument("ethereum", help="ethereum, bitcoin or polygon")):
    """Market and chain snapshot."""
    _run(_aggregator().get_network_data(name))


@app.command()
def verify(
    identity_type: str = typer.Argument(..., help="email, phone, social or wallet"),
    value: str = typer.Argument(..., help="Identifier to verify"),
    network: Optional[str] = typer.Option(None, "--network", "-n", help="Chain to anchor on"),
):
    """Anchor an identity verification."""
    _run(_aggregator().verify_identity(identity_type, value, network))


@app.command()
def wallet(
    address: str = typer.Argument(..., help="Wallet address"),
    network: str = typer.Option("ethereum", "--network", "-n"),
):
    """Wallet balance, activity and risk."""
    _run(_aggregator().analyze_wallet(address, network))


@app.command()
def transactions(
    network: str = typer.Argument("ethereum"),
    limit: int = typer.Option(10, "--limit", "-l", help="Number of transactions"),
):
    """Most recent transactions on a network."""
    _run(_aggregator().get_recent_transactions(network, limit))


@app.command()
def threats(query: str = typer.Argument(..., help="Profile name, handle or entity")):
    """Search web intelligence for scam reports."""
    _run(_aggregator().search_threats(query))


@app.command()
def feed():
    """Latest threat headlines."""
    _run(_aggregator().get_live_threat_feed())


@app.command()
def dashboard():
    """Threat dashboard statistics."""
    _run(_aggregator().get_live_threat_data())


@app.command()
def status():
    """Show configured providers and which domains run on synthetic data."""
    credentials = _aggregator().credentials
    _print_result({
        "credentials": {entry.provider.value: entry.present for entry in credentials.credential_set()},
        "mock_mode": asdict(credentials.mock_mode),
    })


@app.command()
def setup():
    """Interactive configuration setup."""
    setup_config()


if __name__ == "__main__":
    app()
