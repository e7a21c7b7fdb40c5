import random

import pytest

from archivestore.resolver import AssetResolver
from archivestore.store import CatalogStore


SAMPLE_CSV = """VisualName,Type,Headline,Text,Tags,Year
Foo,Dove,H,,"a,b",1979
BarHawk,Hawk,Warplanes over the sea,Night raid footage,"military
sea",1980

Olive,dove,Olive branch,A dove carries an olive branch,"peace, a",1979
Ghost,Hawk,Missing asset,,military,unknown
Tank,Hawk,Tank column,Armour advance,"military,a",1982
"""

MEDIA_FILES = [
    "/data/1979/dove/Foo.mp4",
    "/data/1980/hawk/BarHawk.png",
    "/data/1979/dove/olive.jpg",
    "/data/1982/hawk/tank.webm",
]


class FakeSource:
    """Table source whose text or failure can be switched between loads."""

    def __init__(self, text=SAMPLE_CSV):
        self.text = text
        self.exc = None
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return self.text


@pytest.fixture
def resolver():
    return AssetResolver({p.lower(): p for p in MEDIA_FILES})


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def store(source, resolver):
    return CatalogStore(source, resolver, rng=random.Random(7))


@pytest.fixture
def loaded_store(store):
    assert store.load_archive_data()
    return store


@pytest.fixture
def archive_dir(tmp_path):
    """A config directory holding data/items.csv and matching media files."""
    data = tmp_path / "data"
    for path in MEDIA_FILES:
        media = tmp_path / path.lstrip("/")
        media.parent.mkdir(parents=True, exist_ok=True)
        media.write_bytes(b"\x00")
    (data / "notes.txt").write_text("not media", encoding="utf-8")
    (data / "items.csv").write_text(SAMPLE_CSV, encoding="utf-8")
    return tmp_path
