# --- docstruct_lib/assembler.py ---
"""
docstruct_lib/assembler.py: Contains the StructureAssembler, which drives
the per-page pipeline (grouping, classification and optional table
detection) over a whole document.
"""
import logging
import time
from dataclasses import dataclass

from .classifier import BlockClassifier
from .config import ExtractionOptions
from .constants import PAGE_TEXT_SEPARATOR
from .errors import (
    DocumentUnavailable,
    ExtractionCancelled,
    FatalSourceFailure,
    PageProcessingFailure,
)
from .grouper import LineGrouper
from .models import ExtractionResult, ExtractionStats, PageError, PageResult
from .tables import TableDetector

log_assemble = logging.getLogger("docstruct.assemble")


class _StatsAccumulator:
    """Run-scoped counters. Only the assembler that created it writes to it."""

    def __init__(self, total_pages):
        self.total_pages = total_pages
        self.processed_pages = 0
        self.text_pages = 0
        self.scanned_pages = 0
        self.total_text_length = 0
        self.errors = []
        self.warnings = []

    def record_page(self, page_result):
        self.processed_pages += 1
        if page_result.text:
            self.text_pages += 1
        elif page_result.has_graphics:
            self.scanned_pages += 1
        self.total_text_length += len(page_result.text)
        if page_result.needs_ocr:
            self.warnings.append(
                f"Page {page_result.page} has little extractable text and contains "
                f"graphics; OCR may be required."
            )

    def record_failure(self, failure):
        self.errors.append(PageError(page=failure.page, message=failure.message))

    def snapshot(self, elapsed_ms):
        return ExtractionStats(
            total_pages=self.total_pages,
            processed_pages=self.processed_pages,
            text_pages=self.text_pages,
            scanned_pages=self.scanned_pages,
            total_text_length=self.total_text_length,
            processing_time_ms=elapsed_ms,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
        )


@dataclass(frozen=True)
class _PageOutcome:
    """Everything one page contributes to the final result."""

    result: PageResult
    blocks: tuple


class StructureAssembler:
    """
    Runs the structure inference pipeline over a FragmentSource.

    The assembler keeps no state between runs: every call to `extract` owns
    its own statistics and page accumulators, so one instance can serve any
    number of independent runs.

    Args:
        options (ExtractionOptions): Run options. Defaults are used if None.
        grouper (LineGrouper): Line grouping stage.
        classifier (BlockClassifier): Block classification stage.
        table_detector (TableDetector): Raw-fragment table detection stage.
    """

    def __init__(self, options=None, grouper=None, classifier=None, table_detector=None):
        self.options = options or ExtractionOptions()
        self.grouper = grouper or LineGrouper()
        self.classifier = classifier or BlockClassifier(self.options.heading_keywords)
        self.table_detector = table_detector or TableDetector()

    def extract(self, source, on_progress=None, should_cancel=None):
        """
        Extracts text and structure from every selected page, in page order.

        Args:
            source (FragmentSource): Supplies the fragments of each page.
            on_progress (callable): Called after each page with
                (percent, current_page, total_pages).
            should_cancel (callable): Checked before each page; returning True
                abandons the run with ExtractionCancelled.

        Returns:
            ExtractionResult: The assembled result.

        Raises:
            FatalSourceFailure: If the document cannot be read at all.
            ExtractionCancelled: If should_cancel asked to stop.
        """
        start = time.monotonic()
        total_pages = self._page_count(source)
        pages = self._pages_to_process(total_pages)
        stats = _StatsAccumulator(total_pages)
        logging.getLogger("docstruct").info(
            "Extracting structure from %d of %d pages...", len(pages), total_pages
        )

        outcomes = []
        for index, page in enumerate(pages, start=1):
            if should_cancel and should_cancel():
                partial = self._finalize(outcomes, stats, start)
                log_assemble.info("Run cancelled before page %d.", page)
                raise ExtractionCancelled(partial, page)
            outcomes.append(self._run_page(source, page, stats))
            if on_progress:
                on_progress(index / len(pages) * 100, page, total_pages)

        result = self._finalize(outcomes, stats, start)
        log_assemble.info(
            "Finished: %d blocks from %d pages (%d errors) in %.0f ms.",
            len(result.structured_blocks),
            result.stats.processed_pages,
            len(result.stats.errors),
            result.stats.processing_time_ms,
        )
        return result

    def extract_tables(self, source):
        """Runs only the table detector over every selected page."""
        total_pages = self._page_count(source)
        tables = []
        for page in self._pages_to_process(total_pages):
            try:
                page_data = source.get_page_fragments(page)
                tables.extend(self.table_detector.detect(page_data.fragments))
            except DocumentUnavailable as e:
                raise FatalSourceFailure(f"Cannot read document: {e.message}") from e
            except Exception as e:
                log_assemble.warning("Skipping tables on page %d: %s", page, e)
        log_assemble.info("Detected %d tables.", len(tables))
        return tables

    def _page_count(self, source):
        try:
            return source.get_page_count()
        except DocumentUnavailable as e:
            log_assemble.error("Cannot open document: %s", e.message)
            raise FatalSourceFailure(f"Cannot open document: {e.message}") from e
        except Exception as e:
            log_assemble.error("Cannot count pages: %s", e)
            raise FatalSourceFailure(f"Cannot open document: {e}") from e

    def _pages_to_process(self, total_pages):
        selection = self.options.pages
        if selection is None:
            return list(range(1, total_pages + 1))
        out_of_range = sorted(p for p in selection if not 1 <= p <= total_pages)
        if out_of_range:
            log_assemble.warning("Ignoring pages outside 1-%d: %s", total_pages, out_of_range)
        return sorted(p for p in selection if 1 <= p <= total_pages)

    def _run_page(self, source, page, stats):
        """Processes one page, downgrading any page-level fault to a stats entry."""
        try:
            outcome = self._process_page(source, page)
        except DocumentUnavailable as e:
            log_assemble.error("Document became unavailable at page %d: %s", page, e.message)
            raise FatalSourceFailure(f"Cannot read document: {e.message}") from e
        except FatalSourceFailure:
            raise
        except Exception as e:
            if isinstance(e, PageProcessingFailure):
                failure = e
            else:
                failure = PageProcessingFailure(page, str(e))
            log_assemble.warning("%s", failure)
            stats.record_failure(failure)
            return _PageOutcome(PageResult(page=page, text="", error=failure.message), ())

        stats.record_page(outcome.result)
        return outcome

    def _process_page(self, source, page):
        """Builds the page result and blocks for a single page."""
        page_data = source.get_page_fragments(page)
        fragments = list(page_data.fragments)
        foreign = {f.page for f in fragments if f.page != page}
        if foreign:
            raise PageProcessingFailure(
                page, f"source returned fragments from other pages: {sorted(foreign)}"
            )

        text = " ".join(f.text for f in fragments).strip()
        groups = self.grouper.group(fragments)
        blocks = tuple(self.classifier.classify(group) for group in groups)
        tables = ()
        if self.options.extract_tables:
            tables = tuple(self.table_detector.detect(fragments))
        needs_ocr = len(text) < self.options.ocr_text_threshold and page_data.has_graphics

        log_assemble.debug(
            "Page %d: %d fragments, %d groups, %d tables, graphics=%s",
            page,
            len(fragments),
            len(groups),
            len(tables),
            page_data.has_graphics,
        )
        if needs_ocr:
            log_assemble.info("Page %d looks image-only; OCR recommended.", page)

        result = PageResult(
            page=page,
            text=text,
            groups=tuple(groups),
            has_graphics=page_data.has_graphics,
            needs_ocr=needs_ocr,
            tables=tables,
        )
        return _PageOutcome(result, blocks)

    def _finalize(self, outcomes, stats, start):
        """Combines page outcomes, in page order, into an immutable result."""
        elapsed_ms = (time.monotonic() - start) * 1000
        return ExtractionResult(
            full_text=PAGE_TEXT_SEPARATOR.join(o.result.text for o in outcomes),
            structured_blocks=tuple(block for o in outcomes for block in o.blocks),
            page_results=tuple(o.result for o in outcomes),
            stats=stats.snapshot(elapsed_ms),
        )
