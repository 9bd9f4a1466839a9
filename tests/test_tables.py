import pytest

from docstruct_lib.models import BoundingBox
from docstruct_lib.tables import TableDetector, detect_tables


def test_three_aligned_rows_make_one_table(table_rows):
    fragments = table_rows(
        [["Name", "Age", "City"], ["Alice", "30", "Paris"], ["Bob", "25", "Rome"]]
    )
    tables = detect_tables(fragments)
    assert len(tables) == 1
    grid = tables[0]
    assert len(grid.rows) == 3
    assert grid.header_row == ("Name", "Age", "City")
    assert grid.confidence == 0.8
    assert grid.num_cols == 3
    assert grid.page == 1


def test_bounding_box_spans_first_to_last_row(table_rows):
    fragments = table_rows([["Name", "Age", "City"], ["Alice", "30", "Paris"], ["Bob", "25", "Rome"]])
    grid = detect_tables(fragments)[0]
    # cells are 40 wide at x=50/150/250, rows at y=100/120/140
    assert grid.bounding_box == BoundingBox(x=50.0, y=100.0, width=240.0, height=40.0)


def test_two_by_two_is_the_smallest_table(table_rows):
    tables = detect_tables(table_rows([["Key", "Value"], ["a", "1"]]))
    assert len(tables) == 1
    assert tables[0].rows == (("Key", "Value"), ("a", "1"))


def test_single_row_is_not_a_table(table_rows):
    assert detect_tables(table_rows([["Name", "Age", "City"]])) == []


def test_single_column_rows_are_not_a_table(table_rows):
    assert detect_tables(table_rows([["one"], ["two"], ["three"]])) == []


def test_misaligned_rows_do_not_form_a_table(frag):
    fragments = [
        frag("Name", x=50, y=100, width=40),
        frag("Age", x=150, y=100, width=40),
        frag("Alice", x=300, y=120, width=40),
        frag("30", x=420, y=120, width=40),
    ]
    assert detect_tables(fragments) == []


def _two_rows(frag, first_xs, second_xs):
    first = [frag(f"h{i}", x=x, y=100, width=10) for i, x in enumerate(first_xs)]
    second = [frag(f"v{i}", x=x, y=120, width=10) for i, x in enumerate(second_xs)]
    return first + second


def test_column_offset_of_exactly_tolerance_still_aligns(frag):
    tables = detect_tables(_two_rows(frag, [50, 150], [70, 170]))
    assert len(tables) == 1


def test_column_offset_just_past_tolerance_does_not_align(frag):
    assert detect_tables(_two_rows(frag, [50, 150], [71, 171])) == []


def test_alignment_ratio_of_exactly_half_continues_table(frag):
    # 2 of max(3, 4) columns line up
    tables = detect_tables(_two_rows(frag, [50, 150, 250], [50, 150, 400, 500]))
    assert len(tables) == 1
    assert [len(row) for row in tables[0].rows] == [3, 4]
    assert tables[0].header_row is None


def test_alignment_ratio_below_half_breaks_table(frag):
    # 1 of max(3, 4) columns lines up
    assert detect_tables(_two_rows(frag, [50, 150, 250], [50, 300, 400, 500])) == []


def test_column_count_jump_breaks_the_table(table_rows):
    fragments = table_rows(
        [["a", "b"], ["c", "d"], ["e", "f", "g", "h"], ["i", "j", "k", "l"]]
    )
    tables = detect_tables(fragments)
    assert [len(t.rows) for t in tables] == [2, 2]
    assert tables[1].rows[0] == ("e", "f", "g", "h")


def test_one_cell_row_splits_two_tables(table_rows):
    fragments = table_rows(
        [["a", "b", "c"], ["d", "e", "f"], ["Note"], ["g", "h", "i"], ["j", "k", "l"]]
    )
    tables = detect_tables(fragments)
    assert len(tables) == 2
    assert tables[0].rows[-1] == ("d", "e", "f")
    assert tables[1].rows[0] == ("g", "h", "i")


def test_header_row_needs_matching_column_counts(table_rows):
    tables = detect_tables(table_rows([["Name", "Age", "City"], ["Alice", "30"]]))
    assert len(tables) == 1
    assert tables[0].header_row is None


def test_row_tolerance_merges_jittered_cells(frag):
    fragments = [
        frag("Key", x=50, y=100, width=40),
        frag("Value", x=150, y=103, width=40),
        frag("a", x=52, y=120, width=40),
        frag("1", x=148, y=118, width=40),
    ]
    grid = detect_tables(fragments)[0]
    assert grid.rows == (("Key", "Value"), ("a", "1"))


def test_tables_are_detected_per_page(table_rows):
    fragments = table_rows([["a", "b"], ["c", "d"]], page=2) + table_rows(
        [["w", "x"], ["y", "z"]], page=1
    )
    assert [t.page for t in detect_tables(fragments)] == [1, 2]


def test_alignment_ratio():
    detector = TableDetector(column_tolerance=10)

    class Cell:
        def __init__(self, x):
            self.x = x

    row = [Cell(0), Cell(100), Cell(200)]
    previous = [Cell(5), Cell(150)]
    assert detector.alignment_ratio(row, previous) == pytest.approx(1 / 3)


def test_custom_confidence_is_reported(table_rows):
    detector = TableDetector(confidence=0.5)
    grid = detector.detect(table_rows([["a", "b"], ["c", "d"]]))[0]
    assert grid.confidence == 0.5
