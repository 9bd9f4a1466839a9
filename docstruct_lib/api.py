# --- docstruct_lib/api.py ---
"""
docstruct_lib/api.py: Convenience entry points that wire the pdfminer
fragment source to a fresh StructureAssembler.
"""
import logging
import os
from dataclasses import replace

from .assembler import StructureAssembler
from .config import ExtractionOptions
from .errors import DocumentUnavailable, FatalSourceFailure
from .pdfminer_source import PdfMinerFragmentSource

log = logging.getLogger("docstruct.api")


def parse_page_selection(pages_str: str) -> set | None:
    """Parses a page selection string (e.g., '1,3,5-7') into a set of integers."""
    if pages_str.lower() == "all":
        return None
    pages = set()
    try:
        for p in pages_str.split(","):
            part = p.strip()
            if "-" in part:
                s, e = map(int, part.split("-"))
                pages.update(range(s, e + 1))
            else:
                pages.add(int(part))
        return pages
    except ValueError:
        log.error("Invalid page selection format: %s. Defaulting to 'all'.", pages_str)
        return None


def _open_source(pdf_path):
    if not os.path.exists(pdf_path):
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")
    try:
        return PdfMinerFragmentSource(pdf_path)
    except DocumentUnavailable as e:
        log.error("Cannot open %s: %s", pdf_path, e.message)
        raise FatalSourceFailure(e.message) from e


def extract_pdf_structure(pdf_path: str, options=None, on_progress=None):
    """
    Extracts page text, structured blocks and (optionally) tables from a PDF.

    Raises:
        FileNotFoundError: If the PDF does not exist.
        FatalSourceFailure: If the PDF cannot be read at all.
    """
    assembler = StructureAssembler(options or ExtractionOptions())
    with _open_source(pdf_path) as source:
        return assembler.extract(source, on_progress=on_progress)


def extract_pdf_tables(pdf_path: str, pages=None):
    """Runs only the table detector over a PDF and returns its TableGrids."""
    options = ExtractionOptions()
    if pages is not None:
        options = replace(options, pages=frozenset(pages))
    with _open_source(pdf_path) as source:
        return StructureAssembler(options).extract_tables(source)
