import yaml

from archivestore.utils import (
    DEFAULT_CONFIG,
    STORE_ASSETS_DIR,
    determine_media_type,
    discover_media_files,
    load_config,
    merge_config_with_args,
    save_config,
)


def test_discover_media_files(archive_dir):
    (archive_dir / "data" / "1979" / "dove" / "Upper.JPEG").write_bytes(b"\x00")

    found = discover_media_files(archive_dir / "data")

    assert found == {
        "/data/1979/dove/foo.mp4": "/data/1979/dove/Foo.mp4",
        "/data/1979/dove/olive.jpg": "/data/1979/dove/olive.jpg",
        "/data/1979/dove/upper.jpeg": "/data/1979/dove/Upper.JPEG",
        "/data/1980/hawk/barhawk.png": "/data/1980/hawk/BarHawk.png",
        "/data/1982/hawk/tank.webm": "/data/1982/hawk/tank.webm",
    }
    assert list(found.values()) == sorted(found.values())


def test_discover_media_files_missing_root(tmp_path):
    assert discover_media_files(tmp_path / "nowhere") == {}


def test_determine_media_type():
    assert determine_media_type("/data/dove/a.MP4") == "video"
    assert determine_media_type("/data/dove/a.webm") == "video"
    assert determine_media_type("/data/dove/a.jpeg") == "image"
    assert determine_media_type("") == "unknown"


def test_config_round_trip(tmp_path):
    config = {"source": "https://example.org/items.csv", "timeout": 2.5}
    path = save_config(tmp_path, config)

    assert path == tmp_path / STORE_ASSETS_DIR / "config.yaml"
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == config
    assert load_config(tmp_path) == config


def test_load_config_missing_or_corrupt(tmp_path):
    assert load_config(tmp_path) == {}

    config_dir = tmp_path / STORE_ASSETS_DIR
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text("source: [unclosed", encoding="utf-8")
    assert load_config(tmp_path) == {}

    (config_dir / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config(tmp_path) == {}


def test_merge_config_with_args():
    merged = merge_config_with_args(DEFAULT_CONFIG, {"source": "other.csv", "match": None})
    assert merged["source"] == "other.csv"
    assert merged["match"] == "substring"
    assert DEFAULT_CONFIG["source"] == "data/items.csv"
