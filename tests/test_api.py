import pytest

from conftest import FakeFragmentSource
from docstruct_lib.api import extract_pdf_structure, extract_pdf_tables, parse_page_selection
from docstruct_lib.config import ExtractionOptions
from docstruct_lib.errors import FatalSourceFailure


@pytest.mark.parametrize(
    "selection, expected",
    [
        ("all", None),
        ("ALL", None),
        ("4", {4}),
        ("1,3,5-7", {1, 3, 5, 6, 7}),
        (" 2 , 2-3 ", {2, 3}),
        ("one,two", None),
    ],
)
def test_parse_page_selection(selection, expected):
    assert parse_page_selection(selection) == expected


def test_missing_pdf_raises_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_pdf_structure(str(tmp_path / "absent.pdf"))


def test_unreadable_pdf_is_fatal(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_text("this is not a pdf")
    with pytest.raises(FatalSourceFailure):
        extract_pdf_structure(str(path))


def test_extract_pdf_structure_uses_pdfminer_source(tmp_path, mocker, simple_page):
    path = tmp_path / "doc.pdf"
    path.write_bytes(b"%PDF-1.4")
    fake = FakeFragmentSource([simple_page(1), simple_page(2)])
    source_cls = mocker.patch("docstruct_lib.api.PdfMinerFragmentSource", return_value=fake)
    progress = mocker.Mock()

    result = extract_pdf_structure(
        str(path), ExtractionOptions(pages=frozenset({2})), on_progress=progress
    )

    source_cls.assert_called_once_with(str(path))
    assert [p.page for p in result.page_results] == [2]
    progress.assert_called_once_with(100.0, 2, 2)


def test_extract_pdf_tables(tmp_path, mocker, table_rows):
    path = tmp_path / "doc.pdf"
    path.write_bytes(b"%PDF-1.4")
    fake = FakeFragmentSource(
        [
            table_rows([["a", "b"], ["c", "d"]], page=1),
            table_rows([["e", "f"], ["g", "h"]], page=2),
        ]
    )
    mocker.patch("docstruct_lib.api.PdfMinerFragmentSource", return_value=fake)
    tables = extract_pdf_tables(str(path), pages={2})
    assert [t.page for t in tables] == [2]
    assert fake.requested == [2]
