import pytest

from podofo.errors import InvalidInput
from podofo.pages import PageSelection, coerce_chunk_size, output_name, parse_ranges, resolve_plan


def test_all_mode_one_singleton_per_page():
    plan = resolve_plan(PageSelection(mode="all"), 4)
    assert plan == [[0], [1], [2], [3]]


@pytest.mark.parametrize("mode", ["all", "range", "fixed"])
def test_zero_pages_is_invalid(mode):
    with pytest.raises(InvalidInput):
        resolve_plan(PageSelection(mode=mode, ranges=["1"]), 0)


def test_range_overlaps_collapse_and_sort():
    plan = resolve_plan(PageSelection(mode="range", ranges=["2-5", "1-3"]), 10)
    assert plan == [[0], [1], [2], [3], [4]]


def test_range_discards_token_order():
    plan = resolve_plan(PageSelection(mode="range", ranges=[5, "1-2", 3]), 5)
    assert plan == [[0], [1], [2], [4]]


def test_range_mixed_pairs_and_singles():
    plan = resolve_plan(PageSelection(mode="range", ranges=["1-2", "4"]), 5)
    assert plan == [[0], [1], [3]]


def test_range_out_of_bounds_tokens_are_dropped():
    plan = resolve_plan(PageSelection(mode="range", ranges=["20", 0, "3-9", "4-2", 2]), 5)
    assert plan == [[1]]


def test_range_malformed_tokens_are_dropped():
    tokens = ["abc", "1-x", "-3", 2.5, True, None, ["1"], {"a": 1}, " 3 ", "4 - 5"]
    plan = resolve_plan(PageSelection(mode="range", ranges=tokens), 5)
    assert plan == [[2], [3], [4]]


def test_range_nothing_valid_gives_empty_plan():
    assert resolve_plan(PageSelection(mode="range", ranges=["99"]), 5) == []
    assert resolve_plan(PageSelection(mode="range", ranges=[]), 5) == []


def test_fixed_chunks_with_remainder():
    plan = resolve_plan(PageSelection(mode="fixed", fixed_size=3), 7)
    assert plan == [[0, 1, 2], [3, 4, 5], [6]]


def test_fixed_chunks_evenly_divisible():
    plan = resolve_plan(PageSelection(mode="fixed", fixed_size=2), 4)
    assert plan == [[0, 1], [2, 3]]


def test_fixed_chunk_larger_than_document():
    assert resolve_plan(PageSelection(mode="fixed", fixed_size=10), 3) == [[0, 1, 2]]


@pytest.mark.parametrize("size", [0, -4])
def test_fixed_non_positive_size_means_single_pages(size):
    plan = resolve_plan(PageSelection(mode="fixed", fixed_size=size), 3)
    assert plan == [[0], [1], [2]]


@pytest.mark.parametrize(
    "value, expected",
    [(None, 1), ("", 1), ("abc", 1), ("0", 1), (-2, 1), (True, 1), ("3", 3), (5, 5), ("3.7", 1), ("2pages", 1)],
)
def test_coerce_chunk_size(value, expected):
    assert coerce_chunk_size(value) == expected


def test_unknown_mode_is_invalid():
    with pytest.raises(InvalidInput):
        resolve_plan(PageSelection(mode="odd"), 3)


def test_parse_ranges():
    assert parse_ranges(None) == []
    assert parse_ranges("  ") == []
    assert parse_ranges('["1-3", 5]') == ["1-3", 5]


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "3"])
def test_parse_ranges_rejects_non_arrays(raw):
    with pytest.raises(InvalidInput):
        parse_ranges(raw)


def test_selection_from_form_defaults_to_all():
    selection = PageSelection.from_form(None, None, None)
    assert selection.mode == "all"
    assert selection.fixed_size == 1


def test_selection_from_form_range_and_fixed():
    assert PageSelection.from_form("range", '["2"]', None).ranges == ["2"]
    assert PageSelection.from_form("FIXED", None, "4").fixed_size == 4
    # ranges are only decoded in range mode
    assert PageSelection.from_form("all", "garbage", None).ranges == []


def test_selection_from_form_rejects_unknown_mode():
    with pytest.raises(InvalidInput):
        PageSelection.from_form("everything", None, None)


def test_output_names_follow_plan_position():
    assert output_name(0) == "page-1.pdf"
    assert output_name(2, "png") == "page-3.png"
