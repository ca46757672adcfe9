"""
Datum Unit Tests
Tests for canopy/schemas/datum.py
"""
import pytest

from canopy.merkle import build_tree
from canopy.schemas.datum import (
    BytesDatum,
    Datum,
    TextDatum,
    serialize_item,
)
from canopy.schemas.errors import NoDataException

from fixtures.words import Word


class TestSerializeItem:
    """Tests for serialize_item()."""

    def test_bytes_like(self):
        assert serialize_item(b"abc") == b"abc"
        assert serialize_item(bytearray(b"abc")) == b"abc"
        assert serialize_item(memoryview(b"abc")) == b"abc"

    def test_str_is_utf8(self):
        assert serialize_item("héllo") == "héllo".encode("utf-8")

    def test_datum(self):
        assert isinstance(Word("x"), Datum)
        assert serialize_item(Word("x")) == b"x"

    def test_none_raises_no_data(self):
        with pytest.raises(NoDataException):
            serialize_item(None)

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            serialize_item(12)

    def test_serialize_must_return_bytes(self):
        class Bad:
            def serialize(self):
                return "not bytes"

        with pytest.raises(TypeError):
            serialize_item(Bad())


class TestStockData:
    """Tests for the stock Datum implementations."""

    def test_bytes_datum(self):
        assert BytesDatum(b"\x00\x01").serialize() == b"\x00\x01"

    def test_text_datum_encoding(self):
        assert TextDatum("é").serialize() == b"\xc3\xa9"
        assert TextDatum("é", encoding="latin-1").serialize() == b"\xe9"

    def test_stock_items_in_tree(self):
        items = [BytesDatum(b"\x01"), TextDatum("beta"), TextDatum("alpha")]
        tree = build_tree("sha256", items)

        assert tree.leaves() == [b"\x01", b"beta", b"alpha"]
        assert tree.verify(TextDatum("alpha")) is True
        assert tree.verify(b"beta") is True
        with pytest.raises(NoDataException):
            tree.verify(TextDatum("gamma"))
