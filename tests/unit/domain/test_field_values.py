"""
Name: Typed Field Value Tests

Responsibilities:
  - Parse raw stored values into tagged values per field type
  - Relation wildcard and legacy scalar handling
"""

import pytest

from resourcevault.domain.entities import FieldType
from resourcevault.domain.field_values import (
    AttachmentValue,
    BooleanValue,
    DateValue,
    NumberValue,
    RelationValue,
    TextValue,
    as_text,
    parse_field_value,
    to_number,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "field_type, raw, expected",
    [
        (FieldType.TEXT, "Laptop", TextValue("Laptop")),
        (FieldType.TEXTAREA, "long\ntext", TextValue("long\ntext")),
        (FieldType.NUMBER, 5.0, NumberValue("5")),
        (FieldType.DATE, "2024-03-05", DateValue("2024-03-05")),
        (FieldType.BOOLEAN, True, BooleanValue(True)),
        (FieldType.BOOLEAN, "true", BooleanValue(True)),
        (FieldType.BOOLEAN, "yes", BooleanValue(False)),
        (FieldType.IMAGE, "https://cdn/x.png", AttachmentValue("https://cdn/x.png")),
    ],
)
def test_parse_by_type(field_type, raw, expected):
    assert parse_field_value(field_type, raw) == expected


@pytest.mark.parametrize("raw", [None, "", []])
def test_empty_values_parse_to_none(raw):
    assert parse_field_value(FieldType.TEXT, raw) is None
    assert parse_field_value(FieldType.PROJECT, raw) is None


def test_relation_list_and_legacy_scalar():
    multi = parse_field_value(FieldType.PROJECT, ["p1", "p2"])
    single = parse_field_value(FieldType.USER, "u1")

    assert multi == RelationValue(("p1", "p2"), multiple=True)
    assert single == RelationValue(("u1",), multiple=False)
    assert multi.to_store() == ["p1", "p2"]
    assert single.to_store() == "u1"


def test_relation_wildcard_matches_anything():
    value = parse_field_value(FieldType.PROJECT, ["all"])

    assert value.has_wildcard
    assert value.matches("p-anything")


def test_relation_membership():
    value = parse_field_value(FieldType.USER, ["u1", "u2"])

    assert value.matches("u2")
    assert not value.matches("u3")


def test_number_conversion_is_lenient():
    assert to_number("42") == 42.0
    assert to_number(" 1.5 ") == 1.5
    assert to_number("") == 0.0
    assert to_number("abc") is None
    assert to_number("nan") is None


def test_as_text_normalizes_scalars():
    assert as_text(True) == "true"
    assert as_text(3.0) == "3"
    assert as_text(None) == ""
