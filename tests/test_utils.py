"""Tests for utility functions."""

from datetime import datetime, timezone

import pytest

from querycore.constants import OrderDirection
from querycore.exceptions import InvalidConfigError
from querycore.schema import Record
from querycore.utils import chunk_iter, stable_key, validate_key_separator


class TestChunkIter:
    def test_even_chunks(self):
        assert list(chunk_iter([1, 2, 3, 4], 2)) == [[1, 2], [3, 4]]

    def test_remainder_chunk(self):
        assert list(chunk_iter(["a", "b", "c"], 2)) == [["a", "b"], ["c"]]

    def test_non_positive_size_yields_whole_sequence(self):
        assert list(chunk_iter([1, 2, 3], 0)) == [[1, 2, 3]]

    def test_empty(self):
        assert list(chunk_iter([], 3)) == []


class TestStableKey:
    def test_none(self):
        assert stable_key(None) == "null"

    def test_independent_of_insertion_order(self):
        assert stable_key({"a": 1, "b": [1, 2]}) == stable_key({"b": [1, 2], "a": 1})

    def test_different_values_differ(self):
        assert stable_key({"first": 10}) != stable_key({"first": 11})

    def test_datetime_and_enum(self):
        when = datetime(2024, 1, 2, tzinfo=timezone.utc)
        key = stable_key({"at": when, "dir": OrderDirection.DESC})
        assert "2024-01-02T00:00:00+00:00" in key
        assert '"DESC"' in key

    def test_sets_are_sorted(self):
        assert stable_key({3, 1, 2}) == stable_key({2, 3, 1})

    def test_pydantic_model(self):
        record = Record(id="u1", data={"name": "Ann"})
        assert stable_key(record) == stable_key(Record(id="u1", data={"name": "Ann"}))


class TestValidateKeySeparator:
    @pytest.mark.parametrize("sep", ["_", "__", "."])
    def test_valid(self, sep):
        assert validate_key_separator(sep) == sep

    @pytest.mark.parametrize("sep", ["", " ", "_ "])
    def test_invalid(self, sep):
        with pytest.raises(InvalidConfigError) as exc:
            validate_key_separator(sep)
        assert exc.value.config_key == "FILTER_KEY_SEPARATOR"
