"""H3 cell helpers - validation of hex group arguments and cell centroids."""

import re
from typing import List, Sequence, Tuple

import h3

CELL_ID_LENGTH = 15

_CELL_RE = re.compile(r"[0-9a-fA-F]{%d}" % CELL_ID_LENGTH)


class InvalidHexGroupError(ValueError):
    """A hex group argument is not a comma-separated list of H3 cells."""


def is_valid_hex(group: str) -> bool:
    """
    Check a hex group: comma-separated 15-char hexadecimal cell IDs.

    An empty string, or any empty token (e.g. a trailing comma), is invalid.

    >>> is_valid_hex("852a1393fffffff,852a104bfffffff")
    True
    >>> is_valid_hex("852a1393fffffff,")
    False
    """
    if not group:
        return False
    return all(_CELL_RE.fullmatch(cell) for cell in group.split(","))


def parse_hex_groups(groups: Sequence[str]) -> List[str]:
    """Validate every hex group up front, raising on the first bad one."""
    for group in groups:
        if not is_valid_hex(group):
            raise InvalidHexGroupError(
                f"invalid hex group {group!r}, should be a comma-separated list of H3 hexes"
            )
    return list(groups)


def is_valid_cell(cell_id: str) -> bool:
    """True for a well-formed H3 cell ID. Empty or null IDs are not cells."""
    if not cell_id or not _CELL_RE.fullmatch(cell_id):
        return False
    return h3.is_valid_cell(cell_id)


def cell_to_lat_lng(cell_id: str) -> Tuple[float, float]:
    """Centroid of an H3 cell as (lat, lng)."""
    lat, lng = h3.cell_to_latlng(cell_id)
    return lat, lng
