import pytest

from docstruct_lib.config import ConfigService, ExtractionOptions
from docstruct_lib.constants import DEFAULT_HEADING_KEYWORDS, OCR_TEXT_THRESHOLD


def test_missing_file_uses_defaults(tmp_path):
    path = tmp_path / "docstruct.cfg"
    options = ConfigService(str(path)).get_extraction_options()
    assert options == ExtractionOptions()
    assert options.heading_keywords == DEFAULT_HEADING_KEYWORDS
    assert options.ocr_text_threshold == OCR_TEXT_THRESHOLD
    assert not path.exists()


def test_values_are_read_from_extraction_section(tmp_path):
    path = tmp_path / "docstruct.cfg"
    path.write_text(
        "[Extraction]\n"
        "extract_tables = yes\n"
        "ocr_text_threshold = 10\n"
        "heading_keywords = Capítulo, Anexo ,\n",
        encoding="utf-8",
    )
    options = ConfigService(str(path)).get_extraction_options()
    assert options.extract_tables is True
    assert options.ocr_text_threshold == 10
    assert options.heading_keywords == ("Capítulo", "Anexo")
    assert options.pages is None


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "docstruct.cfg"
    path.write_text("[Extraction]\nextract_tables = true\n")
    options = ConfigService(str(path)).get_extraction_options()
    assert options.extract_tables is True
    assert options.ocr_text_threshold == OCR_TEXT_THRESHOLD


def test_invalid_value_names_the_file(tmp_path):
    path = tmp_path / "docstruct.cfg"
    path.write_text("[Extraction]\nocr_text_threshold = many\n")
    with pytest.raises(ValueError, match="docstruct.cfg"):
        ConfigService(str(path)).get_extraction_options()


def test_saved_settings_round_trip(tmp_path):
    service = ConfigService(str(tmp_path / "docstruct.cfg"))
    settings = service.get_settings()
    settings["Extraction"]["ocr_text_threshold"] = 75
    service.save_settings(settings)
    assert service.get_extraction_options().ocr_text_threshold == 75
