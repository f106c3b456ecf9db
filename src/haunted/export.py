# export helpers for the final haunted text
import html
import io
import logging
import re
from pathlib import Path
from typing import List, Optional, Union

import fitz  # PyMuPDF

from .models import ExportFormat

logger = logging.getLogger(__name__)

NUMBERED = re.compile(r'^\d+\.')
HAS_UPPER = re.compile(r'[A-Z]')

PDF_CSS = """
body { font-family: serif; font-size: 12pt; color: #2a2a2a; }
h1 { font-size: 18pt; color: #8b0000; text-align: center; margin-bottom: 24pt; }
h2 { font-size: 14pt; color: #8b0000; margin-top: 6pt; margin-bottom: 6pt; }
p { text-align: justify; margin-bottom: 12pt; }
"""

MEDIA_TYPES = {
    ExportFormat.TXT: "text/plain; charset=utf-8",
    ExportFormat.MD: "text/markdown; charset=utf-8",
    ExportFormat.PDF: "application/pdf",
}


def _is_shouting(line: str) -> bool:
    return line == line.upper() and bool(HAS_UPPER.search(line))


def export_as_text(content: str) -> str:
    """Plain text export is the merged text exactly as produced"""
    return content


def format_as_markdown(content: str) -> str:
    """Turn heading-looking lines into markdown headings, leave the rest alone"""
    formatted: List[str] = []

    for line in content.split('\n'):
        trimmed = line.strip()

        # already markdown or too long to be a heading
        if not trimmed or len(trimmed) >= 80 or trimmed.startswith('#'):
            formatted.append(line)
            continue

        if _is_shouting(trimmed) and len(trimmed) < 50:
            formatted.append(f"# {trimmed}")
        elif trimmed.endswith(':') or NUMBERED.match(trimmed):
            formatted.append(f"## {trimmed}")
        else:
            formatted.append(line)

    return '\n'.join(formatted)


def _is_pdf_heading(paragraph: str) -> bool:
    if paragraph.startswith('#'):
        return True
    return len(paragraph) < 80 and (_is_shouting(paragraph) or paragraph.endswith(':'))


def _to_html(content: str, title: Optional[str]) -> str:
    parts = []
    if title:
        parts.append(f"<h1>{html.escape(title)}</h1>")

    for paragraph in content.split('\n\n'):
        paragraph = paragraph.strip()
        if not paragraph:
            continue
        if _is_pdf_heading(paragraph):
            parts.append(f"<h2>{html.escape(paragraph.lstrip('#').strip())}</h2>")
        else:
            parts.append(f"<p>{html.escape(paragraph).replace(chr(10), '<br/>')}</p>")

    return "<body>" + "".join(parts) + "</body>"


def render_pdf(content: str, title: Optional[str] = None) -> bytes:
    """Lay the text out on letter pages with 50pt margins"""
    story = fitz.Story(html=_to_html(content, title), user_css=PDF_CSS)
    buffer = io.BytesIO()
    writer = fitz.DocumentWriter(buffer)

    mediabox = fitz.paper_rect("letter")
    where = mediabox + (50, 50, -50, -50)

    more = True
    while more:
        device = writer.begin_page(mediabox)
        more, _ = story.place(where)
        story.draw(device)
        writer.end_page()
    writer.close()

    return buffer.getvalue()


def render_export(content: str, fmt: ExportFormat, title: Optional[str] = None) -> Union[str, bytes]:
    if fmt == ExportFormat.TXT:
        return export_as_text(content)
    if fmt == ExportFormat.MD:
        return format_as_markdown(content)
    return render_pdf(content, title)


def safe_filename(filename: str) -> str:
    cleaned = re.sub(r'[^A-Za-z0-9._-]+', '_', filename).strip('._')
    return cleaned or "haunted"


def write_export(content: str, filename: str, fmt: ExportFormat, output_dir: Union[str, Path]) -> Path:
    """Write an export to <output_dir>/<filename>.<fmt> and return the path"""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{safe_filename(filename)}.{fmt.value}"

    rendered = render_export(content, fmt, title=filename)
    if isinstance(rendered, bytes):
        path.write_bytes(rendered)
    else:
        path.write_text(rendered, encoding="utf-8")

    logger.info(f"✓ Saved: {path}")
    return path
