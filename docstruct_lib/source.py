# --- docstruct_lib/source.py ---
"""
docstruct_lib/source.py: The narrow contract every fragment provider must
honour. Decoder-specific page and content objects never cross it.
"""
from typing import Protocol, runtime_checkable

from .models import PageFragments


@runtime_checkable
class FragmentSource(Protocol):
    """Supplies per-page positioned fragments for one document."""

    def get_page_count(self) -> int:
        """Returns the number of pages, or raises DocumentUnavailable."""

    def get_page_fragments(self, page: int) -> PageFragments:
        """Returns the fragments of a 1-based page.

        Raises PageUnavailable when that page cannot be decoded and
        DocumentUnavailable when no page can be reached at all.
        """
