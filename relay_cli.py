"""
Developer CLI for the Relay service.
"""
import json
from pathlib import Path

import requests
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from relay_service.core.config import load_settings
from relay_service.core.errors import MalformedRequestError, UnsupportedFeatureError
from relay_service.core.factory import ServiceFactory
from relay_service.protocol.parsers.use_tags import UseTagExtractor
from relay_service.protocol.prompts import prompt_for_logging
from relay_service.protocol.schemas import ChatRequest, parse_request

# --- Configuration ---
API_BASE_URL = "http://127.0.0.1:9123/v1"


console = Console()
app = typer.Typer(
    name="relay-cli",
    help="Inspect prompts, tool calls and streams of the Relay service.",
    add_completion=False,
)


def _load_request(path: Path) -> ChatRequest:
    try:
        return parse_request(path.read_text(encoding="utf-8"))
    except (OSError, MalformedRequestError) as e:
        console.print(f"[bold red]Error:[/bold red] could not read request from {path}: {e}")
        raise typer.Exit(1)


@app.command()
def compose(
    request_file: Path = typer.Argument(..., help="JSON file holding a chat request."),
    show_tools: bool = typer.Option(True, "--show-tools/--hide-tools", help="Include the tool contract section."),
):
    """Print the flat prompt a request is turned into."""
    request = _load_request(request_file)
    composer = ServiceFactory(load_settings()).get_composer()
    try:
        prompt = composer.compose(request)
    except UnsupportedFeatureError as e:
        console.print(f"[bold red]Rejected:[/bold red] {e} ({', '.join(e.features)})")
        raise typer.Exit(2)
    console.print(prompt if show_tools else prompt_for_logging(prompt), markup=False, highlight=False)


@app.command()
def extract(answer_file: Path = typer.Argument(..., help="Text file holding a backend answer.")):
    """List the tool calls found in an answer."""
    invocations = UseTagExtractor().extract(answer_file.read_text(encoding="utf-8"))
    if not invocations:
        console.print("No tool calls found.")
        return
    table = Table(title="Tool calls")
    table.add_column("#", justify="right")
    table.add_column("Tool", style="cyan")
    table.add_column("Offset", justify="right")
    table.add_column("Arguments")
    for i, inv in enumerate(invocations, 1):
        table.add_row(str(i), inv.name, str(inv.position), inv.arguments)
    console.print(table)


@app.command()
def send(
    request_file: Path = typer.Argument(..., help="JSON file holding a chat request."),
    url: str = typer.Option(API_BASE_URL, help="Base URL of a running Relay service."),
    raw: bool = typer.Option(False, help="Print raw SSE frames instead of rendered text."),
):
    """Send a request to a running service and render the event stream."""
    payload = json.loads(request_file.read_text(encoding="utf-8"))
    try:
        resp = requests.post(f"{url}/messages", json=payload, stream=True)
    except requests.RequestException as e:
        console.print(f"[bold red]Error:[/bold red] Could not connect to the service at {url}.")
        console.print("Please ensure the service is running: [bold]python -m relay_service.app[/bold]")
        console.print(f"Details: {e}")
        raise typer.Exit(1)

    with resp:
        if resp.status_code != 200:
            console.print(f"[bold red]HTTP {resp.status_code}:[/bold red] {resp.text}")
            raise typer.Exit(1)
        for line in resp.iter_lines(decode_unicode=True):
            if raw:
                console.print(line, markup=False, highlight=False)
                continue
            if not line or not line.startswith("data: "):
                continue
            data = line[len("data: ") :]
            if data == "[DONE]":
                console.print()
                break
            event = json.loads(data)
            if event["type"] == "content_block_delta" and event["delta"]["type"] == "text_delta":
                console.print(event["delta"]["text"], end="", markup=False, highlight=False)
            elif event["type"] == "content_block_start" and event["content_block"]["type"] == "tool_use":
                block = event["content_block"]
                console.print()
                console.print(Panel(block["id"], title=f"tool_use: {block['name']} (block {event['index']})"))
            elif event["type"] == "content_block_delta" and event["delta"]["type"] == "input_json_delta":
                console.print(event["delta"]["partial_json"], markup=False)


@app.command()
def serve():
    """Run the HTTP service with the configured settings."""
    from relay_service.app.__main__ import main

    main()


if __name__ == "__main__":
    app()
