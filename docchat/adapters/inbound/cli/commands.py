"""CLI interface for docchat."""

import json
import mimetypes
import uuid
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ....composition.container import (
    get_chat_service,
    get_document_store,
    get_search_service,
    new_memory,
)
from ....config.logging import setup_logging
from ....config.settings import settings
from ....core.domain import Document
from ....core.domain.exceptions import DocumentNotFoundError
from ....core.domain.utils import clean_text
from ...common.exception_handler import format_exception_json

app = typer.Typer(
    name="docchat",
    help="docchat - chat with your uploaded documents",
    add_completion=False,
)

console = Console(legacy_windows=False)

# Full stack traces in error output
DEBUG_MODE = settings.debug


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    setup_logging(settings.log_level, json_format=settings.log_json)


def handle_cli_error(exc: Exception) -> None:
    """Display an error in structured form.

    In debug mode the full JSON error is shown; otherwise a short message
    with the error code.
    """
    error_data = format_exception_json(exc, include_trace=DEBUG_MODE)

    if DEBUG_MODE:
        console.print(
            Panel(
                json.dumps(error_data, indent=2, ensure_ascii=False),
                title="[bold red]Error Details[/]",
                border_style="red",
            )
        )
        return

    error_type = error_data["error"]["type"]
    error_msg = error_data["error"]["message"]
    error_code = error_data["error"].get("code", "UNKNOWN")
    location = error_data.get("location", {})

    console.print(f"\n[red]Error [{error_code}]:[/] {error_msg}")
    console.print(f"[dim]Type: {error_type}[/]")
    if location:
        loc_str = f"{location.get('file', '?')}:{location.get('line', '?')} in {location.get('method', '?')}"
        console.print(f"[dim]Location: {loc_str}[/]")

    console.print("[dim]Set DEBUG=true for full details[/]")


def _print_sources(titles: list[str]) -> None:
    if titles:
        console.print("[dim]Sources:[/]")
        for title in titles:
            console.print(f"  [dim]{title}[/]")


@app.command()
def chat(
    document: list[str] = typer.Option(
        None, "--document", "-d", help="Restrict answers to these document IDs"
    ),
) -> None:
    """Start an interactive chat session."""
    console.print(
        Panel.fit(
            "[bold blue]docchat[/]\n"
            "[dim]Ask questions about your uploaded documents[/]\n\n"
            "[dim]Type 'quit' or 'exit' to leave, 'clear' to reset the conversation[/]",
            title="Welcome",
            border_style="blue",
        )
    )

    try:
        service = get_chat_service()
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    memory = new_memory()

    while True:
        try:
            message = Prompt.ask("\n[bold cyan]You[/]")

            if message.lower() in ("quit", "exit", "q"):
                console.print("[dim]Goodbye![/]")
                break

            if message.strip().lower() == "clear":
                memory.clear()
                console.print("[dim]Conversation cleared.[/]")
                continue

            if not message.strip():
                continue

            frames = service.ask_stream(message, memory, document_ids=document or None)
            sources: list[str] = []
            with Live(console=console, refresh_per_second=12) as live:
                for frame in frames:
                    live.update(Panel(Markdown(frame.content), title="[bold blue]Assistant[/]"))
                    sources = [source.title for source in frame.sources]
            _print_sources(sources)

        except KeyboardInterrupt:
            console.print("\n[dim]Goodbye![/]")
            break
        except Exception as exc:
            handle_cli_error(exc)


@app.command()
def ask(
    message: str = typer.Argument(..., help="Question about your documents"),
    document: list[str] = typer.Option(
        None, "--document", "-d", help="Restrict the answer to these document IDs"
    ),
) -> None:
    """Ask a single question and print the answer."""
    try:
        service = get_chat_service()
        with console.status("[bold green]Thinking...[/]"):
            response = service.ask(message, new_memory(), document_ids=document or None)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    console.print(Markdown(response.text))
    if response.used_fallback:
        console.print("[yellow]Answered without the language model.[/]")
    _print_sources([source.title for source in response.sources])


@app.command()
def search(
    query: str = typer.Argument(..., help="Search terms"),
    limit: int = typer.Option(settings.search_default_limit, "--limit", "-n", min=0),
) -> None:
    """Rank documents against a query."""
    try:
        results = get_search_service().search(query, limit=limit)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if not results:
        console.print("[yellow]No documents found.[/]")
        return

    table = Table(title=f"Results for '{query}'")
    table.add_column("Score", justify="right")
    table.add_column("Match")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Snippet")
    for result in results:
        table.add_row(
            f"{result.relevance_score:g}",
            result.match_type.value,
            result.document.doc_id,
            result.document.title,
            result.matched_text,
        )
    console.print(table)


@app.command()
def add(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    title: str = typer.Option(None, "--title", "-t", help="Defaults to the file name"),
    description: str = typer.Option("", "--description"),
    tag: list[str] = typer.Option(None, "--tag", help="Repeat for several tags"),
) -> None:
    """Register a plain-text file as a document."""
    try:
        text = clean_text(path.read_text(encoding="utf-8", errors="replace"))
        document = Document(
            doc_id=str(uuid.uuid4()),
            title=title or path.stem,
            description=description,
            tags=list(tag or []),
            extracted_text=text,
            file_name=path.name,
            original_file_name=path.name,
            file_path=str(path.resolve()),
            file_size=path.stat().st_size,
            mime_type=mimetypes.guess_type(path.name)[0] or "text/plain",
            uploaded_by="cli",
        )
        saved = get_document_store().save(document)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    console.print(f"[green]Added[/] {saved.title} [dim]({saved.doc_id})[/]")


@app.command()
def delete(doc_id: str = typer.Argument(..., help="Document ID")) -> None:
    """Soft-delete a document."""
    try:
        if not get_document_store().soft_delete(doc_id):
            raise DocumentNotFoundError("Document not found", context={"id": doc_id})
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    console.print(f"[green]Deleted[/] {doc_id}")


@app.command()
def status() -> None:
    """Show configuration and document store status."""
    console.print("[bold]docchat status[/]\n")

    if settings.google_api_key:
        console.print("[green]OK[/] Google API key configured")
    else:
        console.print("[yellow]--[/] Google API key not set (fallback answers only)")
    console.print(f"   Model: {settings.llm_model}")

    try:
        store = get_document_store()
        active = store.list_active()
        total = len(store.list_all())
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    console.print(f"\n[bold]Documents ({settings.documents_file}):[/]")
    console.print(f"  {len(active)} active, {total - len(active)} deleted")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host"),
    port: int = typer.Option(8000, "--port"),
    reload: bool = typer.Option(False, "--reload"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "docchat.adapters.inbound.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
