import pytest

from docstruct_lib.errors import DocumentUnavailable, PageUnavailable
from docstruct_lib.models import Fragment, PageFragments


class FakeFragmentSource:
    """An in-memory FragmentSource that can fail selected pages."""

    def __init__(self, pages, failing=(), graphics=(), missing=False, vanish_at=None):
        self.pages = pages
        self.failing = set(failing)
        self.graphics = set(graphics)
        self.missing = missing
        self.vanish_at = vanish_at
        self.requested = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    def get_page_count(self):
        if self.missing:
            raise DocumentUnavailable("no such document")
        return len(self.pages)

    def get_page_fragments(self, page):
        self.requested.append(page)
        if page == self.vanish_at:
            raise DocumentUnavailable("stream closed")
        if page in self.failing:
            raise PageUnavailable(page, "corrupt content stream")
        return PageFragments(
            fragments=tuple(self.pages[page - 1]), has_graphics=page in self.graphics
        )


@pytest.fixture
def frag():
    """Factory for fragments with sensible defaults."""

    def make(text, x=50.0, y=100.0, width=None, height=12.0, font_size=12.0, page=1):
        return Fragment(
            text=text,
            x=x,
            y=y,
            width=width if width is not None else len(text) * 6.0,
            height=height,
            font_size=font_size,
            page=page,
        )

    return make


@pytest.fixture
def simple_page(frag):
    """Factory for a page holding one heading line and one body paragraph."""

    def make(page):
        return [
            frag(f"{page}. OVERVIEW", y=72.0, font_size=20.0, page=page),
            frag(
                "Body text of this page runs on for a while and then ends.",
                y=120.0,
                page=page,
            ),
        ]

    return make


@pytest.fixture
def table_rows(frag):
    """Factory for aligned rows of cells, one row every 20 units from y=100."""

    def make(rows, page=1, x0=50.0, step=100.0, top=100.0):
        fragments = []
        for r, cells in enumerate(rows):
            for c, text in enumerate(cells):
                fragments.append(
                    frag(text, x=x0 + c * step, y=top + r * 20.0, width=40.0, page=page)
                )
        return fragments

    return make
