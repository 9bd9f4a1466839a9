# --- docstruct_lib/models.py ---
"""
docstruct_lib/models.py: Data models for positioned fragments and the
structure inferred from them.

Every object here is created fresh for a single extraction run and is
immutable once built. Coordinates use a top-down convention: `y` grows
towards the bottom of the page.
"""
from dataclasses import dataclass, field
from enum import Enum

from .constants import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE


# --- INPUT MODEL (PHYSICAL LAYOUT) ---
@dataclass(frozen=True)
class Fragment:
    """One positioned, styled run of text reported by a FragmentSource."""

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    page: int = 1

    def __post_init__(self):
        if not self.text or self.text != self.text.strip():
            raise ValueError(f"Fragment text must be non-empty and trimmed: {self.text!r}")
        if self.font_size <= 0:
            raise ValueError(f"Fragment font size must be positive: {self.font_size}")
        if self.page < 1:
            raise ValueError(f"Fragment page must be a positive integer: {self.page}")

    @property
    def right(self) -> float:
        return self.x + self.width


# A Group is an ordered, non-empty run of fragments from a single page.
Group = tuple[Fragment, ...]


@dataclass(frozen=True)
class PageFragments:
    """What a FragmentSource hands over for one page."""

    fragments: tuple[Fragment, ...]
    has_graphics: bool = False


# --- STRUCTURE MODEL (LOGICAL HIERARCHY) ---
class BlockKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    TABLE = "table"


class ListStyle(str, Enum):
    BULLET = "bullet"
    NUMBERED = "numbered"


@dataclass(frozen=True)
class ListMeta:
    """Metadata attached to a List block."""

    is_numbered: bool
    style: ListStyle


@dataclass(frozen=True)
class TableMeta:
    """Raw cell text of a Table block, split from its concatenated text."""

    rows: tuple[tuple[str, ...], ...]


KindMetadata = ListMeta | TableMeta | None


@dataclass(frozen=True)
class StructuredBlock:
    """A classified unit of content derived from exactly one Group."""

    kind: BlockKind
    text: str
    source_fragments: Group
    page: int
    anchor_x: float
    anchor_y: float
    heading_level: int | None = None
    metadata: KindMetadata = None


@dataclass(frozen=True)
class BoundingBox:
    """An axis-aligned box in top-down page coordinates."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class TableGrid:
    """A tabular region spanning at least two aligned rows."""

    rows: tuple[tuple[str, ...], ...]
    page: int
    bounding_box: BoundingBox
    confidence: float
    header_row: tuple[str, ...] | None = None

    @property
    def num_cols(self) -> int:
        return max((len(row) for row in self.rows), default=0)


# --- RUN OUTPUT ---
@dataclass(frozen=True)
class PageError:
    """A page-scoped failure recorded in the run statistics."""

    page: int
    message: str


@dataclass(frozen=True)
class PageResult:
    """The plain text and line groups recovered from a single page."""

    page: int
    text: str
    groups: tuple[Group, ...] = ()
    has_graphics: bool = False
    needs_ocr: bool = False
    tables: tuple[TableGrid, ...] = ()
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class ExtractionStats:
    """Counters describing a finished (or abandoned) extraction run."""

    total_pages: int = 0
    processed_pages: int = 0
    text_pages: int = 0
    scanned_pages: int = 0
    total_text_length: int = 0
    processing_time_ms: float = 0.0
    errors: tuple[PageError, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExtractionResult:
    """Everything produced by one run over one document."""

    full_text: str
    structured_blocks: tuple[StructuredBlock, ...]
    page_results: tuple[PageResult, ...]
    stats: ExtractionStats = field(default_factory=ExtractionStats)

    @property
    def tables(self) -> list[TableGrid]:
        """Returns every table attached to a page result, in page order."""
        return [table for page in self.page_results for table in page.tables]

    def blocks_for_page(self, page: int) -> list[StructuredBlock]:
        return [block for block in self.structured_blocks if block.page == page]
