from __future__ import annotations

import csv
import io
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .resolver import AssetResolver
from .utils import get_logger


class ArtifactType(str, Enum):
    """The two disjoint collections of the archive."""
    DOVE = "Dove"
    HAWK = "Hawk"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ArtifactType":
        wanted = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ValueError(f"Unknown artifact type {value!r}")

    def __str__(self) -> str:
        return self.value


Year = Union[int, float]

_TAG_SPLIT = re.compile(r"[\n,]")
_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


@dataclass(frozen=True)
class Record:
    visual_name: str
    type: ArtifactType
    headline: str
    text: str
    tags: Tuple[str, ...]
    year: Year
    file_path: str = ""

    @property
    def has_year(self) -> bool:
        return not (isinstance(self.year, float) and math.isnan(self.year))

    def to_dict(self) -> Dict:
        """JSON-ready form, keyed like the source columns."""
        return {
            "visualName": self.visual_name,
            "type": self.type.value,
            "headline": self.headline,
            "text": self.text,
            "tags": list(self.tags),
            "year": self.year if self.has_year else None,
            "filePath": self.file_path,
        }


def parse_tags(value: Optional[str]) -> Tuple[str, ...]:
    """Split a Tags cell on newlines or commas, dropping blanks."""
    if not value:
        return ()
    return tuple(tag.strip() for tag in _TAG_SPLIT.split(value) if tag.strip())


def parse_year(value: Optional[str]) -> Year:
    """Parse the leading base-10 integer of a Year cell, NaN if there is none."""
    match = _LEADING_INT.match(value or "")
    if not match:
        return float("nan")
    return int(match.group(1))


def parse_table(text: str) -> List[Dict[str, str]]:
    """Parse header-row CSV text into row dictionaries.

    Blank lines are skipped and header names are stripped.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text, newline=""))
    header: Optional[List[str]] = None
    rows = []
    for cells in reader:
        if not cells or all(not c.strip() for c in cells):
            continue
        if header is None:
            header = [c.strip() for c in cells]
            continue
        rows.append({name: (cells[i] if i < len(cells) else None) for i, name in enumerate(header)})
    return rows


def build_record(row: Dict[str, Optional[str]], resolver: AssetResolver) -> Record:
    """Build a Record from one parsed row.

    Raises:
        ValueError: if the row's Type is not a known artifact type
    """
    artifact_type = ArtifactType.parse(row.get("Type"))
    visual_name = row.get("VisualName") or ""

    return Record(
        visual_name=visual_name,
        type=artifact_type,
        headline=row.get("Headline") or "",
        text=row.get("Text") or "",
        tags=parse_tags(row.get("Tags")),
        year=parse_year(row.get("Year")),
        file_path=resolver.resolve(artifact_type.value, visual_name),
    )


def build_records(rows: Iterable[Dict[str, Optional[str]]], resolver: AssetResolver) -> List[Record]:
    """Build Records in row order, skipping rows with an unknown Type."""
    log = get_logger()
    records = []
    unresolved = 0

    for row_number, row in enumerate(rows, start=2):  # row 1 is the header
        try:
            record = build_record(row, resolver)
        except ValueError as e:
            log.warning(f"Skipping row {row_number} ({row.get('VisualName') or '?'}): {e}")
            continue
        if not record.file_path:
            unresolved += 1
        records.append(record)

    log.debug(f"Built {len(records)} records ({unresolved} without a media file)")
    return records
