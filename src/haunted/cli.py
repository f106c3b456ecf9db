import typer
import asyncio
from pathlib import Path
from typing import Optional
import logging
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.panel import Panel

from .config import get_settings
from .exceptions import HauntedError
from .export import write_export
from .haunting_service import HauntingService
from .models import ExportFormat, HauntRequest
from .pagination import clamp_page_number, divide_into_pages
from .pdf_parser import PDFParser
from .syllabus_extractor import SyllabusExtractor
from .validation import is_image_upload

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize Typer app
app = typer.Typer(
    name="haunted",
    help="Turn syllabi and documents into haunted study material using AI",
    add_completion=False
)

# Initialize console for rich output
console = Console()


def _read_source(path: Path) -> str:
    """Read text from a pdf or a plain text file"""
    if path.suffix.lower() == ".pdf":
        return PDFParser().extract_text(str(path)).text
    return path.read_text(encoding="utf-8")


def _require_file(path: Path) -> None:
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)


@app.command()
def haunt(
    source: Path = typer.Argument(..., help="PDF or text file to haunt"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory for generated files"),
    instructions: Optional[str] = typer.Option(None, "--instructions", "-i", help="Custom instructions for the model"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", help="Maximum characters per llm call"),
    overlap: Optional[int] = typer.Option(None, "--overlap", help="Overlap between chunks"),
    per_page: Optional[int] = typer.Option(None, "--per-page", help="Characters per page"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")
):
    """Regenerate a document as haunted text"""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    _require_file(source)
    settings = get_settings()

    try:
        text = _read_source(source)
    except (HauntedError, OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error reading {source}: {e}[/red]")
        raise typer.Exit(1)

    request = HauntRequest(
        text=text,
        instructions=instructions,
        max_chunk_size=chunk_size or settings.max_chunk_size,
        overlap_size=settings.overlap_size if overlap is None else overlap,
        characters_per_page=per_page or settings.characters_per_page
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        progress.add_task("Summoning the haunted text...", total=None)
        response = asyncio.run(HauntingService().haunt(request))

    if not response.success:
        console.print(f"[red]Error: {response.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ Haunted {response.processed_chunks} chunks in {response.processing_time:.2f} seconds[/green]")
    path = write_export(response.haunted_text, source.stem, ExportFormat.TXT, output_dir or settings.output_dir)
    console.print(f"[green]✓ Saved to: {path}[/green]")
    display_page_summary(response.pages)


@app.command()
def syllabus(
    image: Path = typer.Argument(..., help="Photo or scan of a course syllabus")
):
    """Extract units and topics from a syllabus image"""
    _require_file(image)
    if not is_image_upload(image.name, None):
        console.print("[red]Error: Only image files are supported (JPG, PNG, etc.)[/red]")
        raise typer.Exit(1)

    try:
        data = asyncio.run(SyllabusExtractor().extract(image.read_bytes()))
    except HauntedError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title="Syllabus Units")
    table.add_column("Unit", style="cyan")
    table.add_column("Topics", style="magenta")
    for unit in data.units:
        table.add_row(unit.title, "\n".join(unit.topics))
    console.print(table)


@app.command()
def paginate(
    source: Path = typer.Argument(..., help="Text file to paginate"),
    per_page: int = typer.Option(2000, "--per-page", help="Characters per page"),
    page: Optional[int] = typer.Option(None, "--page", "-p", help="Show this page (1-based)")
):
    """Split a text file into pages"""
    _require_file(source)
    pages = divide_into_pages(source.read_text(encoding="utf-8"), per_page)

    if page is None:
        display_page_summary(pages)
        return

    if not pages:
        console.print("[yellow]Nothing to show, the file is empty[/yellow]")
        return

    number = clamp_page_number(page, len(pages))
    console.print(Panel(pages[number - 1], title=f"Page {number} of {len(pages)}"))


@app.command()
def export(
    source: Path = typer.Argument(..., help="Text file with haunted content"),
    fmt: ExportFormat = typer.Option(ExportFormat.MD, "--format", "-f", help="Export format"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory")
):
    """Export haunted text as txt, markdown or pdf"""
    _require_file(source)
    path = write_export(
        source.read_text(encoding="utf-8"),
        source.stem,
        fmt,
        output_dir or get_settings().output_dir
    )
    console.print(f"[green]✓ Exported to: {path}[/green]")


def display_page_summary(pages):
    """Display page count and a preview of each page"""
    table = Table(title=f"{len(pages)} pages")
    table.add_column("Page", style="cyan")
    table.add_column("Characters", style="magenta")
    table.add_column("Preview")
    for number, text in enumerate(pages, 1):
        preview = text[:60].replace("\n", " ")
        table.add_row(str(number), str(len(text)), f"{preview}{'...' if len(text) > 60 else ''}")
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Host to bind the server to"),
    port: int = typer.Option(8000, "--port", help="Port to bind the server to")
):
    """Start the FastAPI server"""

    console.print(f"[green]Starting server on {host}:{port}[/green]")

    import uvicorn
    uvicorn.run("src.haunted.api:app", host=host, port=port, reload=True)

if __name__ == "__main__":
    app()
