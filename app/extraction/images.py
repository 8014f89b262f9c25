"""Image payload decoding for collaborator calls."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

LOGGER = logging.getLogger(__name__)

ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".pdf"}
PDF_RENDER_DPI = 200


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes with their MIME type."""

    data: bytes
    mime_type: str


def allowed_suffix(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_SUFFIXES


def sniff_mime_type(data: bytes) -> str:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"%PDF"):
        return "application/pdf"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def decode_base64_image(value: str) -> bytes:
    """Decode base64 text, stripping a ``data:...;base64,`` header if present."""
    raw = (value or "").strip()
    if raw.startswith("data:") and "," in raw:
        raw = raw.split(",", 1)[1]
    try:
        return base64.b64decode(raw, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image is not valid base64 data.") from exc


def render_pdf_first_page(data: bytes, dpi: int = PDF_RENDER_DPI) -> bytes:
    """Rasterize the first PDF page to PNG bytes.

    Unreadable documents raise ``ValueError`` whatever error PyMuPDF reports.
    """
    try:
        with fitz.open(stream=data, filetype="pdf") as pdf:
            page_count = pdf.page_count
            if page_count > 1:
                LOGGER.info("PDF has %s pages; only the first page is used.", page_count)
            pix = pdf[0].get_pixmap(dpi=dpi, alpha=False) if page_count else None
            png = pix.tobytes("png") if pix is not None else b""
    except Exception as exc:
        # FileDataError on open, mupdf FzError* types on page access.
        LOGGER.warning("PDF could not be rendered: %s", exc)
        raise ValueError("PDF could not be read.") from exc
    if not png:
        raise ValueError("PDF has no pages.")
    return png


def load_image(data: bytes | str) -> ImagePayload:
    """Build an image payload from raw bytes, base64 text or a data URL.

    PDFs are converted to a PNG of their first page.
    """
    raw = decode_base64_image(data) if isinstance(data, str) else data
    if not raw:
        raise ValueError("Image is empty.")
    mime_type = sniff_mime_type(raw)
    if mime_type == "application/pdf":
        return ImagePayload(data=render_pdf_first_page(raw), mime_type="image/png")
    return ImagePayload(data=raw, mime_type=mime_type)
