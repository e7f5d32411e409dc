"""Local, table-driven coordinate resolution for field tasks.

Resolution never leaves the process: explicit task coordinates win, then
coordinates embedded in a map link, then the postal code reference table.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from ...data.pincode_repository import PincodeTable
from ...models.domain import Coordinate, Task
from ..geospatial import is_valid_coordinate

_AT_PATTERN = re.compile(r"@(-?[0-9]+\.[0-9]+),(-?[0-9]+\.[0-9]+)")
_QUERY_PATTERN = re.compile(r"\?q=(-?[0-9]+\.[0-9]+),(-?[0-9]+\.[0-9]+)")
# plain decimal notation, ASCII digits only
_NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def coerce_float(value: Any) -> Optional[float]:
    """Parse a numeric field, returning None for blanks and garbage."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not _NUMBER_PATTERN.fullmatch(text):
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def extract_coordinates(url: Optional[str]) -> Optional[Coordinate]:
    """Pull a coordinate out of a map link (``@lat,lng`` first, then ``?q=lat,lng``)."""

    if not url or not isinstance(url, str):
        return None
    for pattern in (_AT_PATTERN, _QUERY_PATTERN):
        match = pattern.search(url)
        if match:
            return Coordinate(latitude=float(match.group(1)), longitude=float(match.group(2)))
    return None


def explicit_coordinate(latitude: Any, longitude: Any) -> Optional[Coordinate]:
    """Return the explicit pair, or None if missing, unparseable, out of range or (0, 0)."""

    lat = coerce_float(latitude)
    lon = coerce_float(longitude)
    if lat is None or lon is None:
        return None
    # (0, 0) is how unset coordinates are stored
    if lat == 0 and lon == 0:
        return None
    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinate(latitude=lat, longitude=lon)


class GeocodeResolver:
    """Resolve tasks to coordinates against an injected pincode table."""

    def __init__(self, pincodes: PincodeTable) -> None:
        self.pincodes = pincodes

    def resolve(self, task: Task) -> Optional[Coordinate]:
        coordinate = explicit_coordinate(task.latitude, task.longitude)
        if coordinate is not None:
            return coordinate

        coordinate = extract_coordinates(task.map_url)
        if coordinate is not None:
            return coordinate

        if task.pincode:
            return self.pincodes.get(task.pincode)
        return None
