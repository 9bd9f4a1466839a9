# --- docstruct_lib/errors.py ---
"""
docstruct_lib/errors.py: Failure types raised by fragment sources and the
structure assembler.
"""


class PageUnavailable(Exception):
    """A FragmentSource could not decode a single page."""

    def __init__(self, page, message):
        super().__init__(f"Page {page} unavailable: {message}")
        self.page, self.message = page, message


class DocumentUnavailable(Exception):
    """A FragmentSource cannot reach the document at all."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class PageProcessingFailure(Exception):
    """A recoverable, page-scoped failure. The run continues without the page."""

    def __init__(self, page, message):
        super().__init__(f"Error processing page {page}: {message}")
        self.page, self.message = page, message


class FatalSourceFailure(Exception):
    """An unrecoverable failure. No result is produced for the run."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ExtractionCancelled(Exception):
    """Raised when the caller abandons a run between two pages."""

    def __init__(self, partial_result, next_page):
        super().__init__(f"Extraction cancelled before page {next_page}")
        self.partial_result = partial_result
        self.next_page = next_page
