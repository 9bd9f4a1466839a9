# --- docstruct_lib/pdfminer_source.py ---
"""
docstruct_lib/pdfminer_source.py: A FragmentSource backed by pdfminer.six.

pdfminer layout objects are converted to Fragments here and never leave
this module.
"""
import logging
from collections import Counter

from pdfminer.converter import PDFPageAggregator
from pdfminer.layout import LAParams, LTChar, LTFigure, LTImage, LTTextLine
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfinterp import PDFPageInterpreter, PDFResourceManager
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser

from .constants import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE
from .errors import DocumentUnavailable, PageUnavailable
from .models import Fragment, PageFragments

log_source = logging.getLogger("docstruct.source")


class PdfMinerFragmentSource:
    """
    Reads positioned text fragments from a PDF file, one page at a time.

    Args:
        pdf_path (str): The file path to the PDF.
        laparams (LAParams): pdfminer layout parameters. Defaults if None.
    """

    def __init__(self, pdf_path, laparams=None):
        self.pdf_path = pdf_path
        self.laparams = laparams or LAParams()
        self._fp = None
        self._pages = []
        try:
            self._fp = open(pdf_path, "rb")
            document = PDFDocument(PDFParser(self._fp))
            self._pages = list(PDFPage.create_pages(document))
        except Exception as e:
            self.close()
            raise DocumentUnavailable(f"Could not open {pdf_path}: {e}") from e
        if not self._pages:
            self.close()
            raise DocumentUnavailable(f"No pages found in {pdf_path}")
        self._rsrcmgr = PDFResourceManager()
        log_source.debug("Opened %s with %d pages.", pdf_path, len(self._pages))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if self._fp:
            self._fp.close()
            self._fp = None

    def get_page_count(self):
        if self._fp is None:
            raise DocumentUnavailable(f"{self.pdf_path} is closed")
        return len(self._pages)

    def get_page_fragments(self, page):
        """Lays out a 1-based page and converts its text lines to Fragments."""
        if self._fp is None:
            raise DocumentUnavailable(f"{self.pdf_path} is closed")
        if not 1 <= page <= len(self._pages):
            raise PageUnavailable(page, f"out of range 1-{len(self._pages)}")
        try:
            device = PDFPageAggregator(self._rsrcmgr, laparams=self.laparams)
            interpreter = PDFPageInterpreter(self._rsrcmgr, device)
            interpreter.process_page(self._pages[page - 1])
            layout = device.get_result()
            fragments = self._fragments_from_layout(layout, page)
            has_graphics = bool(
                self._find_elements_by_type(layout, (LTImage, LTFigure))
            )
        except Exception as e:
            raise PageUnavailable(page, str(e)) from e
        log_source.debug(
            "Page %d: %d fragments, graphics=%s", page, len(fragments), has_graphics
        )
        return PageFragments(fragments=tuple(fragments), has_graphics=has_graphics)

    def _fragments_from_layout(self, layout, page):
        """Splits every text line into phrases and maps them to top-down Fragments."""
        fragments = []
        for line in self._find_elements_by_type(layout, LTTextLine):
            line_y = round(layout.y1 - line.y0, 2)
            for text, x0, x1, chars in self._get_phrases_from_line(line):
                fragments.append(
                    Fragment(
                        text=text,
                        x=round(x0 - layout.x0, 2),
                        y=line_y,
                        width=round(x1 - x0, 2),
                        height=round(line.height, 2),
                        font_size=self._get_font_size(chars),
                        font_family=chars[0].fontname or DEFAULT_FONT_FAMILY,
                        page=page,
                    )
                )
        return sorted(fragments, key=lambda f: (f.y, f.x))

    def _get_words_from_line(self, line):
        """Extracts individual words (and coordinates) from a line object."""
        words, word_chars, start_x, last_x = [], [], -1, -1
        for char in line:
            if isinstance(char, LTChar) and char.get_text().strip():
                if not word_chars or char.x0 - last_x > 1.0:
                    if word_chars:
                        words.append((word_chars, start_x, last_x))
                    word_chars, start_x = [char], char.x0
                else:
                    word_chars.append(char)
                last_x = char.x1
        if word_chars:
            words.append((word_chars, start_x, last_x))
        return words

    def _get_phrases_from_line(self, line):
        """Tokenizes a line into phrases separated by gaps wider than its font size."""
        words = self._get_words_from_line(line)
        if not words:
            return []
        gap_thresh = self._get_font_size([c for chars, _, _ in words for c in chars])
        phrases, current, start_x, end_x = [], [], -1, -1
        for chars, x0, x1 in words:
            if current and x0 - end_x > gap_thresh:
                phrases.append(self._make_phrase(current, start_x, end_x))
                current = []
            if not current:
                start_x = x0
            current.append(chars)
            end_x = x1
        if current:
            phrases.append(self._make_phrase(current, start_x, end_x))
        return [p for p in phrases if p[0]]

    def _make_phrase(self, words, start_x, end_x):
        text = " ".join("".join(c.get_text() for c in chars) for chars in words).strip()
        return text, start_x, end_x, [c for chars in words for c in chars]

    def _get_font_size(self, chars):
        """Gets the most common character size, or the default."""
        sizes = [round(c.size, 2) for c in chars if getattr(c, "size", 0) > 0]
        return Counter(sizes).most_common(1)[0][0] if sizes else DEFAULT_FONT_SIZE

    def _find_elements_by_type(self, obj, t):
        """Recursively finds all layout elements of a specific type."""
        e = []
        if isinstance(obj, t):
            e.append(obj)
        if hasattr(obj, "_objs"):
            for child in obj:
                e.extend(self._find_elements_by_type(child, t))
        return e
