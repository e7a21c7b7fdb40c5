from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import requests

from .utils import get_logger


@dataclass(frozen=True)
class ArchiveLoadError(RuntimeError):
    location: str
    message: str
    status_code: Optional[int] = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code} for {self.location}: {self.message}"
        return f"{self.location}: {self.message}"


class TableSource(ABC):
    """Zero-argument callable returning the raw catalog table text."""

    location = ""

    @abstractmethod
    def __call__(self) -> str:
        ...


class HttpTableSource(TableSource):
    def __init__(self, base_url: str, data_path: str = "data/items.csv", timeout_s: float = 10.0):
        if data_path:
            base = base_url if base_url.endswith("/") else base_url + "/"
            self.location = urljoin(base, data_path)
        else:
            self.location = base_url
        self.timeout_s = float(timeout_s)

    def __call__(self) -> str:
        get_logger().debug(f"Fetching catalog table from {self.location}")
        try:
            resp = requests.get(self.location, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise ArchiveLoadError(location=self.location, message=str(e) or type(e).__name__) from e
        if resp.status_code // 100 != 2:
            raise ArchiveLoadError(location=self.location, message=resp.text[:200] or resp.reason or "request failed",
                                   status_code=int(resp.status_code))
        resp.encoding = "utf-8"
        return resp.text


class FileTableSource(TableSource):
    def __init__(self, path: Path):
        self.path = Path(path)
        self.location = str(self.path)

    def __call__(self) -> str:
        get_logger().debug(f"Reading catalog table from {self.path}")
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ArchiveLoadError(location=self.location, message=str(e)) from e


def make_source(location: str, timeout_s: float = 10.0) -> TableSource:
    """Pick an HTTP source for http(s) URLs and a file source otherwise.

    A URL ending in "/" is the application base and gets the default table
    path appended; any other URL names the table itself.
    """
    if location.startswith(("http://", "https://")):
        if location.endswith("/"):
            return HttpTableSource(location, timeout_s=timeout_s)
        return HttpTableSource(location, data_path="", timeout_s=timeout_s)
    return FileTableSource(Path(location))
