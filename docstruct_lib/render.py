# --- docstruct_lib/render.py ---
"""
docstruct_lib/render.py: Turns an ExtractionResult into Markdown, padded
plain-text tables, or JSON-ready dictionaries.
"""
import re
from dataclasses import asdict

from .constants import BULLET_GLYPHS
from .models import BlockKind, ListStyle, TableMeta

BULLET_MARKER_RE = re.compile(rf"^[{BULLET_GLYPHS}\-*+]\s+")


def format_table_for_display(grid):
    """Formats a TableGrid into a list of strings for readable display."""
    if not grid or not grid.rows:
        return []
    num_cols = grid.num_cols
    widths = [0] * num_cols
    for row in grid.rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    output_lines = []
    for row in grid.rows:
        cells = list(row) + [""] * (num_cols - len(row))
        output_lines.append("  ".join(c.ljust(widths[i]) for i, c in enumerate(cells)).rstrip())
    return output_lines


def format_table_as_markdown(grid):
    """Converts a TableGrid into a GitHub Flavored Markdown table."""
    if not grid or not grid.rows:
        return []
    return _rows_as_markdown(grid.rows, grid.num_cols)


def _rows_as_markdown(rows, num_cols):
    def line(cells):
        cells = [c.replace("|", "\\|") for c in cells]
        cells += [""] * (num_cols - len(cells))
        return f"| {' | '.join(cells[:num_cols])} |"

    h_line = line(list(rows[0]))
    sep_line = f"| {' | '.join(['---'] * num_cols)} |"
    return [h_line, sep_line] + [line(list(row)) for row in rows[1:]]


def render_block(block):
    """Renders one StructuredBlock as Markdown."""
    if block.kind == BlockKind.HEADING:
        return f"{'#' * block.heading_level} {block.text}"
    if block.kind == BlockKind.LIST and block.metadata.style == ListStyle.BULLET:
        return BULLET_MARKER_RE.sub("- ", block.text, count=1)
    if block.kind == BlockKind.TABLE and isinstance(block.metadata, TableMeta):
        rows = [[c.strip() for c in row] for row in block.metadata.rows]
        num_cols = max(len(row) for row in rows)
        if num_cols >= 2:
            return "\n".join(_rows_as_markdown(rows, num_cols))
    return block.text


def render_markdown(result):
    """Renders every page's blocks, followed by its detected tables, as Markdown."""
    parts = []
    for page in result.page_results:
        parts.extend(render_block(b) for b in result.blocks_for_page(page.page))
        for table in page.tables:
            parts.append("\n".join(format_table_as_markdown(table)))
    return "\n\n".join(parts) + ("\n" if parts else "")


def _fragment_to_dict(fragment):
    return asdict(fragment)


def _table_to_dict(table):
    return {
        "page": table.page,
        "rows": [list(row) for row in table.rows],
        "header_row": list(table.header_row) if table.header_row else None,
        "bounding_box": asdict(table.bounding_box),
        "confidence": table.confidence,
    }


def _block_to_dict(block, include_fragments):
    data = {
        "kind": block.kind.value,
        "heading_level": block.heading_level,
        "text": block.text,
        "page": block.page,
        "anchor": {"x": block.anchor_x, "y": block.anchor_y},
        "metadata": None,
    }
    if block.kind == BlockKind.LIST:
        data["metadata"] = {
            "is_numbered": block.metadata.is_numbered,
            "style": block.metadata.style.value,
        }
    elif block.kind == BlockKind.TABLE:
        data["metadata"] = {"rows": [list(row) for row in block.metadata.rows]}
    if include_fragments:
        data["fragments"] = [_fragment_to_dict(f) for f in block.source_fragments]
    return data


def result_to_dict(result, include_fragments=False):
    """Converts an ExtractionResult into a JSON-serializable dictionary."""
    pages = []
    for page in result.page_results:
        page_data = {
            "page": page.page,
            "text": page.text,
            "has_graphics": page.has_graphics,
            "needs_ocr": page.needs_ocr,
            "group_count": len(page.groups),
            "tables": [_table_to_dict(t) for t in page.tables],
            "error": page.error,
        }
        if include_fragments:
            page_data["groups"] = [[_fragment_to_dict(f) for f in g] for g in page.groups]
        pages.append(page_data)
    return {
        "full_text": result.full_text,
        "structured_blocks": [
            _block_to_dict(b, include_fragments) for b in result.structured_blocks
        ],
        "page_results": pages,
        "stats": asdict(result.stats),
    }
