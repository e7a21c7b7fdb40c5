import math

import pytest

from archivestore.records import (
    ArtifactType,
    Record,
    build_record,
    build_records,
    parse_table,
    parse_tags,
    parse_year,
)
from archivestore.resolver import AssetResolver


def test_round_trip_row():
    rows = parse_table('VisualName,Type,Headline,Text,Tags,Year\nFoo,Dove,H,,"a,b",1979\n')
    record = build_record(rows[0], AssetResolver([]))

    assert record.tags == ("a", "b")
    assert record.year == 1979
    assert record.type == "Dove"
    assert record.type is ArtifactType.DOVE
    assert record.text == ""
    assert record.headline == "H"
    assert record.file_path == ""


def test_parse_table_skips_blank_lines_and_keeps_quoted_newlines():
    text = "\ufeffVisualName , Type,Tags\n\nA,Dove,\"x\ny\"\n   \nB,Hawk,\n"
    rows = parse_table(text)

    assert [r["VisualName"] for r in rows] == ["A", "B"]
    assert rows[0]["Tags"] == "x\ny"
    assert rows[0]["Type"] == "Dove"


def test_parse_table_short_row_fills_missing_columns():
    rows = parse_table("VisualName,Type,Text,Tags\nA,Dove\n")
    assert rows == [{"VisualName": "A", "Type": "Dove", "Text": None, "Tags": None}]


@pytest.mark.parametrize("value,expected", [
    ("a, b ,c", ("a", "b", "c")),
    ("war\npeace", ("war", "peace")),
    ("x,,\n ,y", ("x", "y")),
    ("", ()),
    (None, ()),
])
def test_parse_tags(value, expected):
    assert parse_tags(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("1979", 1979),
    (" 1980 ", 1980),
    ("1981abc", 1981),
    ("1982.7", 1982),
])
def test_parse_year(value, expected):
    assert parse_year(value) == expected


@pytest.mark.parametrize("value", ["unknown", "", None, "c. 1970", "\u0661\u0669\u0667\u0669"])
def test_parse_year_unparsable_is_nan(value):
    assert math.isnan(parse_year(value))


def test_artifact_type_parse_is_case_insensitive():
    assert ArtifactType.parse(" hawk ") is ArtifactType.HAWK
    assert str(ArtifactType.DOVE) == "Dove"
    with pytest.raises(ValueError):
        ArtifactType.parse("Eagle")


def test_missing_optional_fields_default():
    record = build_record({"VisualName": "Foo", "Type": "Hawk", "Year": "n/a"}, AssetResolver([]))

    assert record.headline == ""
    assert record.text == ""
    assert record.tags == ()
    assert not record.has_year
    assert record.to_dict()["year"] is None


def test_build_record_resolves_media():
    resolver = AssetResolver(["/data/1979/dove/Foo.mp4"])
    record = build_record({"VisualName": "Foo", "Type": "Dove", "Year": "1979"}, resolver)
    assert record.file_path == "/data/1979/dove/Foo.mp4"


def test_build_records_skips_unknown_type_and_keeps_order(caplog):
    rows = [
        {"VisualName": "A", "Type": "Dove", "Year": "1979"},
        {"VisualName": "B", "Type": "Eagle", "Year": "1979"},
        {"VisualName": "C", "Type": "Hawk", "Year": "bad"},
    ]
    with caplog.at_level("WARNING", logger="archivestore"):
        records = build_records(rows, AssetResolver([]))

    assert [r.visual_name for r in records] == ["A", "C"]
    assert "Skipping row 3 (B)" in caplog.text


def test_record_is_immutable():
    record = Record("Foo", ArtifactType.DOVE, "H", "", ("a",), 1979)
    with pytest.raises(AttributeError):
        record.year = 1980


def test_to_dict_uses_source_keys():
    record = Record("Foo", ArtifactType.DOVE, "H", "T", ("a", "b"), 1979, "/data/x/dove/foo.mp4")
    assert record.to_dict() == {
        "visualName": "Foo",
        "type": "Dove",
        "headline": "H",
        "text": "T",
        "tags": ["a", "b"],
        "year": 1979,
        "filePath": "/data/x/dove/foo.mp4",
    }
