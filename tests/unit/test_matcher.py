"""
Unit tests for filter matching.
"""
import random

import pytest

from docstore.errors import InvalidDocumentKind
from docstore.storage.matcher import (
    OneOf,
    Scalar,
    compile_filter,
    erase_documents,
    filter_documents,
    matches,
    update_documents,
)


DOC = {"_id": "a1", "name": "Liam", "age": 7, "relation": "son", "active": True, "nickname": None}


@pytest.mark.unit
class TestMatches:
    """Tests for matches()."""

    def test_empty_filter_matches_everything(self):
        assert matches(DOC, {}) is True
        assert matches({}, {}) is True
        assert matches(DOC, None) is True

    def test_scalar_equality(self):
        assert matches(DOC, {"name": "Liam"})
        assert not matches(DOC, {"name": "Max"})

    def test_sequence_means_membership(self):
        assert matches(DOC, {"relation": ["son", "daughter"]})
        assert not matches(DOC, {"relation": ["mother", "father"]})

    def test_empty_sequence_matches_nothing(self):
        assert not matches(DOC, {"relation": []})

    def test_all_keys_must_match(self):
        assert matches(DOC, {"name": "Liam", "age": 7})
        assert not matches(DOC, {"name": "Liam", "age": 8})

    def test_missing_field_never_matches(self):
        assert not matches(DOC, {"surname": "Smith"})
        assert not matches(DOC, {"surname": None})
        assert not matches(DOC, {"surname": [None, "Smith"]})

    def test_explicit_null_field_matches_null(self):
        assert matches(DOC, {"nickname": None})

    def test_booleans_are_not_numbers(self):
        assert matches(DOC, {"active": True})
        assert not matches(DOC, {"active": 1})
        assert not matches({"flag": 1}, {"flag": True})

    def test_int_and_float_compare_by_value(self):
        assert matches(DOC, {"age": 7.0})

    def test_array_field_is_not_matched_by_membership(self):
        doc = {"tags": ["a", "b"]}
        assert not matches(doc, {"tags": "a"})
        assert not matches(doc, {"tags": ["a", "b"]})

    def test_nested_object_filter_is_rejected(self):
        with pytest.raises(InvalidDocumentKind):
            matches(DOC, {"address": {"city": "Paris"}})

    def test_nested_object_inside_sequence_is_rejected(self):
        with pytest.raises(InvalidDocumentKind):
            matches(DOC, {"relation": [{"x": 1}]})

    def test_non_mapping_filter_is_rejected(self):
        with pytest.raises(InvalidDocumentKind):
            matches(DOC, ["name", "Liam"])

    def test_does_not_mutate_inputs(self):
        doc = dict(DOC)
        flt = {"relation": ["son"], "name": "Liam"}
        matches(doc, flt)
        assert doc == DOC
        assert flt == {"relation": ["son"], "name": "Liam"}


@pytest.mark.unit
class TestCompileFilter:
    """Tests for compile_filter()."""

    def test_tags_scalars_and_sequences(self):
        compiled = compile_filter({"a": 1, "b": ["x", "y"], "c": ("z",)})

        assert compiled == {"a": Scalar(1), "b": OneOf(("x", "y")), "c": OneOf(("z",))}

    def test_tagged_values_pass_through(self):
        compiled = compile_filter({"a": Scalar([1, 2]), "b": OneOf((1,))})

        assert compiled["a"] == Scalar([1, 2])
        assert compiled["b"] == OneOf((1,))

    def test_explicit_scalar_can_match_list_value(self):
        assert matches({"tags": ["a", "b"]}, {"tags": Scalar(["a", "b"])})


@pytest.mark.unit
@pytest.mark.parametrize("seed", range(25))
def test_and_semantics_over_random_field_subsets(seed):
    """matches(d, f) is true iff every key of f matches on its own."""
    rng = random.Random(seed)
    values = ["a", "b", "c", 1, 2, True, False, None]
    fields = ["f0", "f1", "f2", "f3", "f4"]
    doc = {f: rng.choice(values) for f in fields if rng.random() < 0.8}

    for _ in range(20):
        flt = {}
        for field in rng.sample(fields, rng.randint(0, len(fields))):
            if rng.random() < 0.5:
                flt[field] = rng.choice(values)
            else:
                flt[field] = rng.sample(values, rng.randint(0, 3))

        expected = all(matches(doc, {k: v}) for k, v in flt.items())
        assert matches(doc, flt) is expected


@pytest.mark.unit
class TestArrayHelpers:
    """Tests for the in-memory filter/update/erase helpers."""

    @pytest.fixture
    def docs(self):
        return [
            {"_id": "1", "relation": "mother"},
            {"_id": "2", "relation": "son", "name": "Liam"},
            {"_id": "3", "relation": "daughter"},
            {"_id": "4", "relation": "son", "name": "Max"},
        ]

    def test_filter_preserves_order(self, docs):
        result = filter_documents(docs, {"relation": "son"})

        assert [d["_id"] for d in result] == ["2", "4"]

    def test_update_merges_shallowly(self, docs):
        changed = update_documents(docs, {"relation": "son"}, {"school": "Primary", "name": "Kid"})

        assert changed == 2
        assert docs[1] == {"_id": "2", "relation": "son", "name": "Kid", "school": "Primary"}
        assert docs[0] == {"_id": "1", "relation": "mother"}

    def test_update_without_matches_changes_nothing(self, docs):
        before = [dict(d) for d in docs]

        assert update_documents(docs, {"relation": "aunt"}, {"x": 1}) == 0
        assert docs == before

    def test_erase_is_stable(self, docs):
        removed = erase_documents(docs, {"relation": ["son"]})

        assert removed == 2
        assert [d["_id"] for d in docs] == ["1", "3"]

    def test_erase_with_empty_filter_removes_everything(self, docs):
        assert erase_documents(docs, {}) == 4
        assert docs == []
