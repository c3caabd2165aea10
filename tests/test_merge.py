from yflow.core.merge import merge_structured


def test_merge_overwrites_and_adds_keys_in_place():
    original = {"title": "Old", "count": 3, "nested": {"a": "A"}, "tail": "T"}

    merged = merge_structured(original, {"nested.b": "B", "title": "New"})

    assert merged == {"title": "New", "count": 3, "nested": {"a": "A", "b": "B"}, "tail": "T"}
    assert list(merged) == ["title", "count", "nested", "tail"]
    assert list(merged["nested"]) == ["a", "b"]


def test_merge_does_not_modify_original():
    original = {"nested": {"a": "A"}}

    merge_structured(original, {"nested.a": "changed", "nested.b": "B"})

    assert original == {"nested": {"a": "A"}}


def test_merge_keeps_non_string_values():
    original = {"flags": [1, 2], "enabled": False, "none": None, "label": "L"}

    merged = merge_structured(original, {"label": "New"})

    assert merged == {"flags": [1, 2], "enabled": False, "none": None, "label": "New"}


def test_merge_nests_below_scalar_when_needed():
    merged = merge_structured({"a": "plain"}, {"a.b": "nested"})

    assert merged == {"a": {"b": "nested"}}


def test_merge_into_non_object_starts_empty():
    assert merge_structured(["not", "an", "object"], {"a.b": "x"}) == {"a": {"b": "x"}}


def test_merge_with_no_updates_is_equal_copy():
    original = {"a": {"b": "x"}, "n": 1}

    merged = merge_structured(original, {})

    assert merged == original
    assert merged is not original
