"""Property-based tests using Hypothesis."""
from __future__ import annotations

from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from orderly import Collection, SortDirection, SortFlag
from orderly.compare import compare_regular, loose_equals, natural_compare
from orderly.serialization import from_json

keys = st.one_of(st.integers(min_value=-50, max_value=50), st.text(alphabet="abc", max_size=3))
mappings = st.dictionaries(keys=keys, values=st.integers(), max_size=12)
int_lists = st.lists(st.integers(min_value=-1000, max_value=1000), max_size=20)
scalars = st.one_of(
    st.integers(min_value=-100, max_value=100),
    st.text(alphabet="0129ab.e -", max_size=6),
    st.none(),
    st.booleans(),
)
natural_text = st.text(alphabet="ab AB0129.", max_size=8)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class TestCollectionProperties:
    """Property tests for Collection transformations."""

    @given(data=mappings)
    def test_transformations_are_pure(self, data: dict[Any, int]) -> None:
        """No transformation changes the receiver."""
        collection = Collection(data)
        before = list(collection.items())

        collection.sort(SortDirection.DESC)
        collection.filter(lambda v: v > 0)
        collection.slice(1, 3, preserve_keys=False)
        collection.group_by(lambda v: v % 3)
        collection.reverse()

        assert list(collection.items()) == before

    @given(data=mappings)
    def test_sort_permutes_entries(self, data: dict[Any, int]) -> None:
        """Sorting reorders entries but keeps every key/value pair."""
        collection = Collection(data)
        result = collection.sort()

        assert result.to_dict() == collection.to_dict()
        values = result.to_list()
        assert values == sorted(values)

    @given(values=int_lists)
    def test_numeric_sort_matches_sorted(self, values: list[int]) -> None:
        """Numeric sort of integers agrees with sorted()."""
        collection = Collection(values)

        assert collection.sort(flag=SortFlag.NUMERIC).to_list() == sorted(values)
        assert collection.sort(SortDirection.DESC, SortFlag.NUMERIC).to_list() == sorted(
            values, reverse=True
        )

    @given(values=int_lists)
    def test_sort_by_is_stable(self, values: list[int]) -> None:
        """sort_by keeps the original order of ties."""
        rows = [{"group": v % 3, "seq": i} for i, v in enumerate(values)]

        result = Collection(rows).sort_by("group").to_list()

        assert result == sorted(rows, key=lambda row: row["group"])

    @given(
        values=int_lists,
        offset=st.integers(min_value=0, max_value=25),
        limit=st.integers(min_value=0, max_value=25),
    )
    def test_slice_matches_list_slicing(self, values: list[int], offset: int, limit: int) -> None:
        """Non-negative offset/limit behave like list slicing."""
        collection = Collection(values)

        assert collection.slice(offset, limit).to_list() == values[offset : offset + limit]

    @given(first=int_lists, second=int_lists)
    def test_merge_concatenates_lists(self, first: list[int], second: list[int]) -> None:
        """Merging positional collections concatenates them."""
        merged = Collection(first).merge(second)

        assert merged.to_list() == first + second
        assert merged.count() == len(first) + len(second)

    @given(data=mappings)
    def test_group_by_partitions(self, data: dict[Any, int]) -> None:
        """Every entry lands in exactly one bucket under its own key."""
        collection = Collection(data)
        grouped = collection.group_by(lambda v: v % 4)

        assert sum(bucket.count() for bucket in grouped) == collection.count()
        for group, bucket in grouped.items():
            for key, value in bucket.items():
                assert value % 4 == group
                assert collection[key] == value

    @given(values=int_lists, needle=st.integers(min_value=-1000, max_value=1000))
    def test_remove_then_contains(self, values: list[int], needle: int) -> None:
        """After removing a value it is no longer contained."""
        result = Collection(values).remove(needle)

        assert not result.contains(needle)
        assert result.count() == len([v for v in values if v != needle])

    @given(data=mappings)
    def test_json_round_trip(self, data: dict[Any, int]) -> None:
        """Decoding the encoded collection restores keys, values and order."""
        collection = Collection(data)

        restored = from_json(collection.to_json())

        assert list(restored.items()) == list(collection.items())


class TestComparisonProperties:
    """Property tests for comparison functions."""

    @given(a=natural_text, b=natural_text)
    def test_natural_compare_antisymmetric(self, a: str, b: str) -> None:
        """Swapping operands flips the sign."""
        assert _sign(natural_compare(a, b)) == -_sign(natural_compare(b, a))

    @given(a=natural_text)
    def test_natural_compare_reflexive(self, a: str) -> None:
        """A string equals itself."""
        assert natural_compare(a, a) == 0
        assert natural_compare(a, a.lower(), case_sensitive=False) == 0

    @given(a=scalars, b=scalars)
    def test_compare_regular_antisymmetric(self, a: object, b: object) -> None:
        """Swapping operands flips the sign."""
        assert compare_regular(a, b) == -compare_regular(b, a)

    @given(a=scalars, b=scalars)
    def test_loose_equals_symmetric(self, a: object, b: object) -> None:
        """Loose equality does not depend on operand order."""
        assert loose_equals(a, b) == loose_equals(b, a)
