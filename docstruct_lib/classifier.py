# --- docstruct_lib/classifier.py ---
"""
docstruct_lib/classifier.py: Contains the BlockClassifier, which types a
single Group as a heading, list, table or paragraph.
"""
import logging
import re

from .constants import (
    BULLET_GLYPHS,
    DEFAULT_HEADING_KEYWORDS,
    HEADING_FALLBACK_LEVEL,
    HEADING_FONT_SIZE,
    HEADING_LEVEL_THRESHOLDS,
    HEADING_MAX_LENGTH,
    TABLE_LINE_TOLERANCE,
    TABLE_MIN_LINE_FRAGMENTS,
)
from .models import BlockKind, ListMeta, ListStyle, StructuredBlock, TableMeta

log_structure = logging.getLogger("docstruct.structure")

NUMBERED_HEADING_RE = re.compile(r"^(\d+(?:\.\d+)*)\.?(?:\s+|$)")
LIST_MARKER_RES = (
    re.compile(rf"^[{BULLET_GLYPHS}]\s+"),
    re.compile(r"^\d+[.)]\s+"),
    re.compile(r"^[a-zA-Z][.)]\s+"),
    re.compile(r"^[-*+]\s+"),
)
TABLE_GAP_RE = re.compile(r"\t|\s{3,}")


class BlockClassifier:
    """
    Assigns exactly one BlockKind to a Group.

    Predicates are tried in a fixed order (heading, list, table) and the
    first match wins; anything left over is a paragraph. Each Group is
    classified on its own, without looking at its neighbours.
    """

    def __init__(self, heading_keywords=DEFAULT_HEADING_KEYWORDS):
        self.heading_keywords = tuple(heading_keywords)
        self._keyword_re = None
        if self.heading_keywords:
            alternatives = "|".join(re.escape(k) for k in self.heading_keywords)
            self._keyword_re = re.compile(rf"^(?:{alternatives})\b", re.IGNORECASE)

    def classify(self, group):
        """Classifies a non-empty Group into a StructuredBlock."""
        if not group:
            raise ValueError("Cannot classify an empty group")
        first = group[0]
        if any(fragment.page != first.page for fragment in group):
            raise ValueError("A group must not span more than one page")

        text = " ".join(fragment.text for fragment in group).strip()
        avg_size = sum(fragment.font_size for fragment in group) / len(group)

        level, metadata = None, None
        if self._is_heading(text, avg_size):
            kind = BlockKind.HEADING
            level = self._heading_level(text, avg_size)
        elif self._is_list(text):
            kind = BlockKind.LIST
            is_numbered = text[:1].isdigit()
            metadata = ListMeta(
                is_numbered=is_numbered,
                style=ListStyle.NUMBERED if is_numbered else ListStyle.BULLET,
            )
        elif self._is_table(text, group):
            kind = BlockKind.TABLE
            metadata = TableMeta(
                rows=tuple(tuple(TABLE_GAP_RE.split(row)) for row in text.split("\n"))
            )
        else:
            kind = BlockKind.PARAGRAPH

        log_structure.debug(
            "Page %d: '%s' -> %s%s",
            first.page,
            text[:40],
            kind.value,
            f" (level {level})" if level else "",
        )
        return StructuredBlock(
            kind=kind,
            text=text,
            source_fragments=tuple(group),
            page=first.page,
            anchor_x=first.x,
            anchor_y=first.y,
            heading_level=level,
            metadata=metadata,
        )

    def _is_heading(self, text, avg_size):
        """Checks font size, lexical shape and length for heading signals."""
        is_short = len(text) < HEADING_MAX_LENGTH
        if avg_size > HEADING_FONT_SIZE and is_short:
            return True
        if self._has_heading_pattern(text):
            return True
        # A short marker-led line is a list item, not an unterminated heading.
        return is_short and not text.endswith(".") and not self._is_list(text)

    def _has_heading_pattern(self, text):
        if NUMBERED_HEADING_RE.match(text):
            return True
        if self._keyword_re and self._keyword_re.match(text):
            return True
        return self._starts_with_caps_run(text)

    def _starts_with_caps_run(self, text):
        """Checks if the text opens with a fully upper-case word."""
        words = text.split()
        if not words:
            return False
        word = words[0].rstrip(".:,;!?")
        letters = [c for c in word if c.isalpha()]
        return len(letters) >= 2 and word.isupper()

    def _is_list(self, text):
        return any(pattern.match(text) for pattern in LIST_MARKER_RES)

    def _is_table(self, text, group):
        """Checks for several fragments on one line separated by wide gaps."""
        if len(group) < TABLE_MIN_LINE_FRAGMENTS:
            return False
        anchor_y = group[0].y
        same_line = [f for f in group if abs(f.y - anchor_y) <= TABLE_LINE_TOLERANCE]
        return len(same_line) >= TABLE_MIN_LINE_FRAGMENTS and bool(TABLE_GAP_RE.search(text))

    def _heading_level(self, text, avg_size):
        """Maps the average font size to a level.

        For large-type headings a leading section number caps the level at its
        numbering depth. Body-size text keeps the plain size mapping.
        """
        level = HEADING_FALLBACK_LEVEL
        for min_size, size_level in HEADING_LEVEL_THRESHOLDS:
            if avg_size >= min_size:
                level = size_level
                break
        match = NUMBERED_HEADING_RE.match(text)
        if match and avg_size > HEADING_FONT_SIZE:
            depth = len(match.group(1).split("."))
            level = min(level, depth)
        return level


def classify_group(group, heading_keywords=DEFAULT_HEADING_KEYWORDS):
    """Classifies one Group with a throwaway BlockClassifier."""
    return BlockClassifier(heading_keywords).classify(group)
