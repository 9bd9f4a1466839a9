# --- docstruct_lib/profile.py ---
"""
docstruct_lib/profile.py: Summarizes what kind of document a finished
extraction came from (born-digital text, scanned images, or a mix).
"""
import logging
from dataclasses import dataclass

from .constants import PROFILE_MEANINGFUL_CHARS, PROFILE_SAMPLE_PAGES

log_layout = logging.getLogger("docstruct.layout")


@dataclass(frozen=True)
class DocumentProfile:
    """Text and image density over a sample of leading pages."""

    document_type: str
    has_text: bool
    has_images: bool
    text_density: float
    image_density: float
    sampled_pages: int


def profile_document(result, sample_pages=PROFILE_SAMPLE_PAGES):
    """Profiles the first successfully processed pages of an ExtractionResult."""
    sample = [p for p in result.page_results if not p.failed][:sample_pages]
    if not sample:
        return DocumentProfile("unknown", False, False, 0.0, 0.0, 0)

    meaningful = sum(
        1
        for page in sample
        for group in page.groups
        for fragment in group
        if len(fragment.text) > PROFILE_MEANINGFUL_CHARS
    )
    image_pages = sum(1 for page in sample if page.has_graphics)
    text_density = meaningful / len(sample)
    image_density = image_pages / len(sample)
    has_text, has_images = meaningful > 0, image_pages > 0

    if has_text and has_images and text_density > 20:
        document_type = "mixed"
    elif has_text and text_density > 10:
        document_type = "text"
    elif has_images or text_density < 5:
        document_type = "scanned"
    else:
        document_type = "unknown"

    log_layout.debug(
        "Document profile: %s (text density %.1f, image density %.2f over %d pages)",
        document_type,
        text_density,
        image_density,
        len(sample),
    )
    return DocumentProfile(
        document_type=document_type,
        has_text=has_text,
        has_images=has_images,
        text_density=text_density,
        image_density=image_density,
        sampled_pages=len(sample),
    )
