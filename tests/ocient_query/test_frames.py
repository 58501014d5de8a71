from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ocient_cli.ocient_query.frames import build_frame, infer_schema
from ocient_cli.ocient_query.types import BOOLEAN, FLOAT, TEXT, TIMESTAMP, ZERO_INSTANT
from ocient_cli.shared.exceptions import ConversionError


def test_empty_rowset_yields_frame_without_fields() -> None:
    frame = build_frame([])
    assert frame.name == "response"
    assert frame.fields == ()
    assert frame.row_count == 0


def test_one_field_per_first_row_key_with_equal_lengths() -> None:
    rows = [
        {"region": "west", "amount": 1.5, "active": True},
        {"amount": 2, "region": "east", "extra": "ignored"},
        {"region": "north"},
    ]
    frame = build_frame(rows)
    assert frame.column_names == ("region", "amount", "active")
    assert all(len(f.values) == 3 for f in frame.fields)
    assert list(frame.field("amount").values) == [1.5, 2.0, 0.0]
    assert list(frame.field("active").values) == [True, False, False]


def test_native_timestamp_column() -> None:
    rows = [
        {"ts": "2024-01-15 10:30:00.123456789"},
        {"ts": "2024-01-16 08:00:00"},
    ]
    frame = build_frame(rows)
    field = frame.field("ts")
    assert field.type == TIMESTAMP
    assert field.values[0] == datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
    assert field.values[1] == datetime(2024, 1, 16, 8, 0, tzinfo=timezone.utc)


def test_rfc3339_timestamp_column() -> None:
    frame = build_frame([{"ts": "2024-01-15T10:30:00Z"}, {"ts": "garbage"}])
    field = frame.field("ts")
    assert field.type == TIMESTAMP
    assert field.values[1] == ZERO_INSTANT


def test_numeric_column_coerces_non_numbers_to_zero() -> None:
    frame = build_frame([{"v": 42.5}, {"v": "oops"}, {"v": None}])
    field = frame.field("v")
    assert field.type == FLOAT
    assert list(field.values) == [42.5, 0.0, 0.0]


def test_text_column_formats_other_values() -> None:
    frame = build_frame([{"t": None}, {"t": 3.0}, {"t": False}, {"t": [1, "a"]}, {"t": "plain"}])
    field = frame.field("t")
    assert field.type == TEXT
    assert list(field.values) == ["", "3", "false", '[1,"a"]', "plain"]


def test_infer_schema_classifies_first_row() -> None:
    schema = infer_schema({"a": 1, "b": "x", "c": True, "d": None, "e": "2024-01-15 10:30:00"})
    assert schema == [("a", FLOAT), ("b", TEXT), ("c", BOOLEAN), ("d", TEXT), ("e", TIMESTAMP)]


def test_strict_mode_raises_on_mismatch() -> None:
    with pytest.raises(ConversionError) as excinfo:
        build_frame([{"v": 1}, {"v": "oops"}], strict=True)
    assert excinfo.value.column == "v"
    assert excinfo.value.row_index == 1
    assert excinfo.value.value == "oops"


def test_strict_mode_still_zeroes_nulls_and_missing_keys() -> None:
    frame = build_frame([{"v": 1, "ts": "2024-01-15 10:30:00"}, {"v": None}], strict=True)
    assert list(frame.field("v").values) == [1.0, 0.0]
    assert frame.field("ts").values[1] == ZERO_INSTANT


def test_to_records_round_trips_rows() -> None:
    frame = build_frame([{"a": "x", "b": 1}, {"a": "y", "b": 2}])
    assert frame.to_records() == [{"a": "x", "b": 1.0}, {"a": "y", "b": 2.0}]


def test_to_dataframe_uses_pandas() -> None:
    pd = pytest.importorskip("pandas")
    frame = build_frame([{"a": "x", "b": 1}])
    df = frame.to_dataframe()
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["a", "b"]


def test_oversized_integers_never_break_frame_building() -> None:
    huge = 10**400
    text_frame = build_frame([{"a": huge}])
    assert text_frame.field("a").type == TEXT
    assert list(text_frame.field("a").values) == [str(huge)]

    float_frame = build_frame([{"a": 1}, {"a": huge}])
    assert list(float_frame.field("a").values) == [1.0, 0.0]
