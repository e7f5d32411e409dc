"""Postal code reference table used to approximate task locations."""

from __future__ import annotations

import csv
import functools
import logging
import math
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from ..config import settings
from ..models.domain import Coordinate

logger = logging.getLogger(__name__)


class PincodeTable:
    """Read-only lookup from an exact pincode string to a reference coordinate."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Coordinate] | None = None) -> None:
        self._entries: Mapping[str, Coordinate] = MappingProxyType(dict(entries or {}))

    def get(self, pincode: Optional[str]) -> Optional[Coordinate]:
        if pincode is None:
            return None
        return self._entries.get(pincode)

    def __contains__(self, pincode: object) -> bool:
        return pincode in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def _parse_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def load_pincode_table(source: Path) -> PincodeTable:
    """Build a table from a CSV file with ``pincode,latitude,longitude`` columns."""

    if not source.exists():
        raise FileNotFoundError(f"Pincode file not found: {source}")

    entries: dict[str, Coordinate] = {}
    with source.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Pincode file '{source}' is missing a header row.")
        for line_number, row in enumerate(reader, start=2):
            pincode = (row.get("pincode") or row.get("Pincode") or "").strip()
            lat = _parse_float(row.get("latitude") or row.get("lat"))
            lon = _parse_float(row.get("longitude") or row.get("lng"))
            if not pincode or lat is None or lon is None:
                logger.warning("Skipping pincode row %s in %s: incomplete record", line_number, source.name)
                continue
            if pincode in entries:
                logger.warning("Duplicate pincode %s in %s, keeping first entry", pincode, source.name)
                continue
            entries[pincode] = Coordinate(latitude=lat, longitude=lon)

    logger.info("Loaded %d pincodes from %s", len(entries), source)
    return PincodeTable(entries)


@functools.lru_cache(maxsize=1)
def get_pincode_table() -> PincodeTable:
    """Process-wide table built once from the configured pincode file."""

    try:
        return load_pincode_table(settings.pincode_file)
    except FileNotFoundError:
        logger.warning("Pincode file %s not found, pincode fallback disabled", settings.pincode_file)
        return PincodeTable()
