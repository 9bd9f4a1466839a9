# --- docstruct_lib/config.py ---
"""
docstruct_lib/config.py: Extraction options and the INI-backed service that
loads them.
"""
import configparser
import logging
from dataclasses import dataclass

from .constants import DEFAULT_HEADING_KEYWORDS, OCR_TEXT_THRESHOLD

log = logging.getLogger("docstruct.config")


@dataclass(frozen=True)
class ExtractionOptions:
    """Knobs for one extraction run.

    Args:
        extract_tables (bool): Also run the table detector on every page and
            attach its grids to the page results.
        pages (frozenset | None): 1-based pages to process. None means all.
        ocr_text_threshold (int): Pages with less text than this and some
            graphics are flagged as needing OCR.
        heading_keywords (tuple): Leading words that mark a heading.
    """

    extract_tables: bool = False
    pages: frozenset | None = None
    ocr_text_threshold: int = OCR_TEXT_THRESHOLD
    heading_keywords: tuple[str, ...] = DEFAULT_HEADING_KEYWORDS


class ConfigService:
    """Manages reading from and writing to a docstruct.cfg file."""

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.defaults = {
            "Extraction": {
                "extract_tables": "false",
                "ocr_text_threshold": str(OCR_TEXT_THRESHOLD),
                "heading_keywords": ", ".join(DEFAULT_HEADING_KEYWORDS),
            },
        }

    def get_settings(self) -> dict:
        """Reads settings from the config file, applying defaults if missing."""
        config = configparser.ConfigParser()
        for section, values in self.defaults.items():
            config[section] = values

        if not config.read(self.config_path, encoding="utf-8"):
            log.info("Config file not found at %s. Using defaults.", self.config_path)

        return self._config_to_dict(config)

    def get_extraction_options(self) -> ExtractionOptions:
        """Builds ExtractionOptions from the [Extraction] section."""
        config = configparser.ConfigParser()
        config.read_dict(self.get_settings())
        section = config["Extraction"]
        try:
            extract_tables = section.getboolean("extract_tables")
            threshold = section.getint("ocr_text_threshold")
        except ValueError as e:
            raise ValueError(f"Invalid value in {self.config_path}: {e}") from e
        keywords = tuple(
            k.strip() for k in section.get("heading_keywords", "").split(",") if k.strip()
        )
        return ExtractionOptions(
            extract_tables=extract_tables,
            ocr_text_threshold=threshold,
            heading_keywords=keywords,
        )

    def save_settings(self, settings: dict):
        """Saves a dictionary of settings to the config file."""
        config = configparser.ConfigParser()
        for section, values in settings.items():
            config[section] = {k: str(v) for k, v in values.items()}

        try:
            with open(self.config_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
            log.info("Settings successfully saved to %s", self.config_path)
        except IOError as e:
            log.error("Failed to write settings to %s: %s", self.config_path, e)

    def _config_to_dict(self, config: configparser.ConfigParser) -> dict:
        """Converts a ConfigParser object to a nested dictionary."""
        return {s: dict(config.items(s)) for s in config.sections()}
