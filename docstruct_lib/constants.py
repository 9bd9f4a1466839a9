# --- docstruct_lib/constants.py ---
"""
docstruct_lib/constants.py: Geometric and lexical thresholds shared by the
structure inference stages. All distances are in page layout units (points).
"""

# --- FRAGMENT DEFAULTS ---
DEFAULT_FONT_SIZE = 12.0
DEFAULT_FONT_FAMILY = "unknown"

# --- LINE GROUPING ---
SAME_LINE_TOLERANCE = 5.0
CONTINUATION_FACTOR = 1.5

# --- BLOCK CLASSIFICATION ---
HEADING_FONT_SIZE = 14.0
HEADING_MAX_LENGTH = 100
# (minimum average font size, heading level), checked top to bottom.
HEADING_LEVEL_THRESHOLDS = (
    (24.0, 1),
    (20.0, 2),
    (18.0, 3),
    (16.0, 4),
    (14.0, 5),
)
HEADING_FALLBACK_LEVEL = 6
DEFAULT_HEADING_KEYWORDS = ("Chapter", "Section", "Part")
BULLET_GLYPHS = "•‣◦⁃∙"
TABLE_LINE_TOLERANCE = 3.0
TABLE_MIN_LINE_FRAGMENTS = 3

# --- TABLE DETECTION ---
TABLE_ROW_TOLERANCE = 5.0
TABLE_COLUMN_TOLERANCE = 20.0
TABLE_MIN_ALIGNMENT = 0.5
TABLE_MAX_COLUMN_DELTA = 1
TABLE_MIN_COLUMNS = 2
TABLE_MIN_ROWS = 2
# Not a measured quantity: every detected grid reports this value.
TABLE_CONFIDENCE_PLACEHOLDER = 0.8

# --- PAGE ASSESSMENT ---
OCR_TEXT_THRESHOLD = 50
PAGE_TEXT_SEPARATOR = "\n\n"

# --- DOCUMENT PROFILE ---
PROFILE_SAMPLE_PAGES = 5
PROFILE_MEANINGFUL_CHARS = 2
