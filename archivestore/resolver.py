from __future__ import annotations

from collections import abc
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Mapping, Union

MATCH_MODES = ("substring", "stem")


class AssetResolver:
    """Match a record's (type, visual name) to a discovered media file.

    The index is keyed by lower-cased path and maps to the actual path.
    Candidates are tried in index order and the first hit wins.
    """

    def __init__(self, media_files: Union[Mapping[str, str], Iterable[str]], match: str = "substring"):
        if match not in MATCH_MODES:
            raise ValueError(f"Unknown match mode {match!r}, expected one of {MATCH_MODES}")
        self.match = match

        if isinstance(media_files, abc.Mapping):
            self._index: Dict[str, str] = {str(k).lower(): str(v) for k, v in media_files.items()}
        else:
            self._index = {str(p).lower(): str(p) for p in media_files}

    def __len__(self) -> int:
        return len(self._index)

    @property
    def paths(self) -> List[str]:
        return list(self._index.values())

    def resolve(self, type: str, visual_name: str) -> str:
        """Return the matching file path, or "" when nothing matches."""
        search_type = (type or "").lower()
        search_name = (visual_name or "").lower()
        if not search_type or not search_name:
            return ""

        segment = f"/{search_type}/"
        for key, path in self._index.items():
            if segment not in key:
                continue
            if self.match == "stem":
                if PurePosixPath(key).stem == search_name:
                    return path
            elif search_name in key:
                return path
        return ""
