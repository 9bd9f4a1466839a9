# --- docstruct_lib/grouper.py ---
"""
docstruct_lib/grouper.py: Contains the LineGrouper, which clusters a page's
fragments into visual lines and paragraph continuations.
"""
import logging

from .constants import CONTINUATION_FACTOR, SAME_LINE_TOLERANCE

log_layout = logging.getLogger("docstruct.layout")


class LineGrouper:
    """
    Clusters fragments into ordered Groups using vertical proximity.

    The result is a pure function of the fragments: the same input always
    yields the same Groups, in the same order, with the same membership.
    """

    def __init__(
        self,
        same_line_tolerance=SAME_LINE_TOLERANCE,
        continuation_factor=CONTINUATION_FACTOR,
    ):
        self.same_line_tolerance = same_line_tolerance
        self.continuation_factor = continuation_factor

    def group(self, fragments):
        """Groups fragments into a list of tuples, each confined to one page."""
        if not fragments:
            return []
        ordered = sorted(fragments, key=lambda f: (f.page, f.y, f.x))
        groups, current = [], [ordered[0]]
        for fragment in ordered[1:]:
            previous = current[-1]
            if fragment.page == previous.page and self._continues(previous, fragment):
                current.append(fragment)
            else:
                groups.append(tuple(current))
                current = [fragment]
        groups.append(tuple(current))
        log_layout.debug(
            "Grouped %d fragments into %d groups.", len(ordered), len(groups)
        )
        return groups

    def _continues(self, previous, fragment):
        """Checks if a fragment shares a line with, or wraps on from, the previous one."""
        dy = abs(fragment.y - previous.y)
        if dy <= self.same_line_tolerance:
            return True
        return dy <= previous.font_size * self.continuation_factor


def group_fragments(fragments):
    """Groups one page's fragments with the default tolerances."""
    return LineGrouper().group(fragments)
