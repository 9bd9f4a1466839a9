# --- docstruct_lib/tables.py ---
"""
docstruct_lib/tables.py: Contains the TableDetector, which finds runs of
column-aligned rows directly in a page's raw fragments.

It works on ungrouped fragments because table rows are usually spaced wider
than the line grouper's continuation tolerance.
"""
import logging
from collections import defaultdict

from .constants import (
    TABLE_COLUMN_TOLERANCE,
    TABLE_CONFIDENCE_PLACEHOLDER,
    TABLE_MAX_COLUMN_DELTA,
    TABLE_MIN_ALIGNMENT,
    TABLE_MIN_COLUMNS,
    TABLE_MIN_ROWS,
    TABLE_ROW_TOLERANCE,
)
from .models import BoundingBox, TableGrid

log_tables = logging.getLogger("docstruct.tables")


class TableDetector:
    """
    Detects tables as consecutive rows with similar column counts and
    horizontally aligned cells.

    Args:
        row_tolerance (float): Max vertical distance between fragments that
            share a row.
        column_tolerance (float): Max horizontal offset between matching
            columns of adjacent rows.
        min_alignment (float): Minimum share of aligned columns for a row to
            extend the current table.
        confidence (float): Value reported on every grid. It is a fixed
            placeholder, not a measurement.
    """

    def __init__(
        self,
        row_tolerance=TABLE_ROW_TOLERANCE,
        column_tolerance=TABLE_COLUMN_TOLERANCE,
        min_alignment=TABLE_MIN_ALIGNMENT,
        confidence=TABLE_CONFIDENCE_PLACEHOLDER,
    ):
        self.row_tolerance = row_tolerance
        self.column_tolerance = column_tolerance
        self.min_alignment = min_alignment
        self.confidence = confidence

    def detect(self, fragments):
        """Returns the TableGrids found in the fragments, page by page."""
        by_page = defaultdict(list)
        for fragment in fragments:
            by_page[fragment.page].append(fragment)

        tables = []
        for page in sorted(by_page):
            rows = self._group_into_rows(by_page[page])
            for table_rows in self._find_row_runs(rows):
                grid = self._build_grid(table_rows, page)
                if grid:
                    tables.append(grid)
        return tables

    def _group_into_rows(self, fragments):
        """Buckets fragments top to bottom into rows, each sorted left to right."""
        if not fragments:
            return []
        ordered = sorted(fragments, key=lambda f: (f.y, f.x))
        rows, current, row_y = [], [], ordered[0].y
        for fragment in ordered:
            if abs(fragment.y - row_y) <= self.row_tolerance:
                current.append(fragment)
            else:
                rows.append(sorted(current, key=lambda f: f.x))
                current, row_y = [fragment], fragment.y
        rows.append(sorted(current, key=lambda f: f.x))
        return rows

    def _find_row_runs(self, rows):
        """Walks the rows and collects every run of at least TABLE_MIN_ROWS rows."""
        runs, candidate = [], []
        for row in rows:
            previous = candidate[-1] if candidate else None
            if len(row) >= TABLE_MIN_COLUMNS and self._continues_table(row, previous):
                candidate.append(row)
                continue
            if len(candidate) >= TABLE_MIN_ROWS:
                runs.append(candidate)
            elif candidate:
                log_tables.debug("Discarding single-row table candidate at y=%.2f", candidate[0][0].y)
            candidate = [row] if len(row) >= TABLE_MIN_COLUMNS else []
        if len(candidate) >= TABLE_MIN_ROWS:
            runs.append(candidate)
        return runs

    def _continues_table(self, row, previous):
        """Checks column count similarity and alignment against the previous row."""
        if previous is None:
            return True
        if abs(len(row) - len(previous)) > TABLE_MAX_COLUMN_DELTA:
            return False
        return self.alignment_ratio(row, previous) >= self.min_alignment

    def alignment_ratio(self, row, previous):
        """Share of column positions whose x offset is within the column tolerance."""
        aligned = sum(
            1
            for cell, prev_cell in zip(row, previous)
            if abs(cell.x - prev_cell.x) <= self.column_tolerance
        )
        return aligned / max(len(row), len(previous))

    def _build_grid(self, table_rows, page):
        """Materializes a run of rows into a TableGrid, or None if it is degenerate."""
        rows = tuple(tuple(f.text.strip() for f in row if f.text.strip()) for row in table_rows)
        if len(rows) < TABLE_MIN_ROWS or any(len(row) < TABLE_MIN_COLUMNS for row in rows):
            log_tables.debug("Rejecting degenerate table on page %d.", page)
            return None

        first_row, last_row = table_rows[0], table_rows[-1]
        left = min(f.x for f in first_row)
        right = max(f.right for f in last_row)
        top = first_row[0].y
        bbox = BoundingBox(
            x=left,
            y=top,
            width=right - left,
            height=abs(last_row[0].y - top),
        )
        header = rows[0] if len(rows[0]) == len(rows[1]) else None
        log_tables.debug(
            "Page %d: table with %d rows x %d cols at (%.1f, %.1f).",
            page,
            len(rows),
            len(rows[0]),
            bbox.x,
            bbox.y,
        )
        return TableGrid(
            rows=rows,
            page=page,
            bounding_box=bbox,
            confidence=self.confidence,
            header_row=header,
        )


def detect_tables(fragments):
    """Detects tables in one page's raw fragments with the default tolerances."""
    return TableDetector().detect(fragments)
