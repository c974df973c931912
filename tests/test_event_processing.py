import pytest

from daylayout.errors import InvalidInput
from daylayout.event_processing import (
    clone_events,
    collides,
    get_events_under,
    left_collisions_count,
    misplaced_events_under,
    normalize_events,
    process_events_under,
    set_layout_params,
    start_end_key,
    update_collisions,
)


def ev(eid, start, end):
    return {"id": eid, "start": start, "end": end}


def working(*events):
    items = clone_events(list(events))
    items.sort(key=start_end_key)
    update_collisions(items)
    return items


def test_collides_overlapping_and_contained() -> None:
    assert collides(ev(1, 0, 60), ev(2, 30, 90))
    assert collides(ev(2, 30, 90), ev(1, 0, 60))
    assert collides(ev(1, 0, 120), ev(2, 30, 60))
    assert collides(ev(2, 30, 60), ev(1, 0, 120))
    assert collides(ev(1, 0, 60), ev(2, 0, 60))


def test_collides_touching_intervals_do_not_collide() -> None:
    assert not collides(ev(1, 0, 60), ev(2, 60, 120))
    assert not collides(ev(2, 60, 120), ev(1, 0, 60))
    assert not collides(ev(1, 0, 30), ev(2, 500, 720))


def test_update_collisions_builds_symmetric_sorted_lists() -> None:
    items = working(ev(1, 0, 60), ev(2, 30, 90), ev(3, 70, 120))

    assert [e["id"] for e in items] == [1, 2, 3]
    assert [e["collisions"] for e in items] == [[1], [0, 2], [1]]


def test_update_collisions_discards_stale_data() -> None:
    items = working(ev(1, 0, 60), ev(2, 30, 90))
    items[0]["collisions"] = [5, 7]
    del items[1]

    update_collisions(items)

    assert items[0]["collisions"] == []


def test_update_collisions_rejects_non_list() -> None:
    with pytest.raises(InvalidInput):
        update_collisions({"id": 1, "start": 0, "end": 10})


def test_left_collisions_count() -> None:
    assert left_collisions_count([], 0) == 0
    assert left_collisions_count([1, 2], 0) == 0
    assert left_collisions_count([0, 2, 5], 3) == 2
    assert left_collisions_count([0, 1], 4) == 2


def test_sort_order_start_then_longest_first() -> None:
    items = [ev("b", 0, 30), ev("c", 10, 20), ev("a", 0, 60)]

    assert [e["id"] for e in sorted(items, key=start_end_key)] == ["a", "b", "c"]


def test_sort_order_identical_intervals_use_id() -> None:
    items = [ev(3, 0, 60), ev(1, 0, 60), ev(2, 0, 60)]

    assert [e["id"] for e in sorted(items, key=start_end_key)] == [1, 2, 3]


def test_clone_events_does_not_share_state_with_input() -> None:
    source = [{"id": 1, "start": 0, "end": 60, "title": "Standup"}]

    cloned = clone_events(source)
    cloned[0]["left"] = 99

    assert source == [{"id": 1, "start": 0, "end": 60, "title": "Standup"}]
    assert cloned[0] == {
        "id": 1,
        "start": 0,
        "end": 60,
        "collisions": [],
        "left": 99,
        "width": 0,
        "has_event_under": False,
        "top_event_id": None,
    }


def test_normalize_events_sets_top_and_drops_working_fields() -> None:
    items = working(ev(1, 45, 90))
    items[0]["left"], items[0]["width"] = 10, 620

    assert normalize_events(items) == [
        {"id": 1, "start": 45, "end": 90, "left": 10, "width": 620, "top": 45}
    ]


def test_set_layout_params_single_and_disjoint() -> None:
    items = working(ev(1, 0, 60), ev(2, 120, 180))

    set_layout_params(items, 10, 620)

    assert [(e["left"], e["width"]) for e in items] == [(10, 620), (10, 620)]


def test_set_layout_params_rebalances_chain() -> None:
    items = working(ev(1, 0, 60), ev(2, 30, 90), ev(3, 70, 120))

    set_layout_params(items, 10, 620)

    assert [(e["left"], e["width"]) for e in items] == [(10, 206), (216, 206), (422, 206)]


def test_set_layout_params_uses_given_bounds() -> None:
    items = working(ev(1, 0, 60), ev(2, 30, 90))

    set_layout_params(items, 100, 301)

    assert [(e["left"], e["width"]) for e in items] == [(100, 150), (250, 150)]


def test_get_events_under_classic_day() -> None:
    items = working(ev(1, 30, 150), ev(2, 540, 600), ev(3, 560, 620), ev(4, 610, 670))

    primary, under = get_events_under(items)

    assert [e["id"] for e in primary] == [1, 2, 3]
    assert [e["id"] for e in under] == [4]
    assert under[0]["top_event_id"] == 2
    assert primary[1]["has_event_under"] is True
    assert [e["collisions"] for e in primary] == [[], [2], [1]]
    assert under[0]["collisions"] == []


def test_get_events_under_one_event_per_anchor() -> None:
    items = working(
        ev(1, 0, 120), ev(2, 0, 60), ev(3, 0, 60), ev(4, 60, 120), ev(5, 60, 120)
    )

    primary, under = get_events_under(items)

    assert [e["id"] for e in primary] == [1, 2, 3]
    assert [(e["id"], e["top_event_id"]) for e in under] == [(4, 2), (5, 3)]
    # nested collisions only track other nested events
    assert [e["collisions"] for e in under] == [[1], [0]]


def test_get_events_under_keeps_event_without_free_space() -> None:
    items = working(ev(1, 0, 60), ev(2, 0, 60), ev(3, 0, 60))

    primary, under = get_events_under(items)

    assert [e["id"] for e in primary] == [1, 2, 3]
    assert under == []


def test_process_events_under_caps_at_right_neighbor() -> None:
    items = working(ev(1, 0, 60), ev(2, 30, 90), ev(3, 70, 120))
    primary, under = get_events_under(items)
    set_layout_params(primary, 10, 620)

    process_events_under(under, primary)

    assert [e["id"] for e in under] == [3]
    assert (under[0]["left"], under[0]["width"]) == (10, 310)


def test_process_events_under_widens_to_left_neighbor() -> None:
    items = working(
        ev(1, 0, 180), ev(2, 0, 60), ev(3, 0, 60), ev(4, 60, 120), ev(5, 120, 180)
    )
    primary, under = get_events_under(items)
    set_layout_params(primary, 10, 620)

    process_events_under(under, primary)

    assert {e["id"]: (e["left"], e["width"]) for e in under} == {
        4: (216, 206),
        5: (216, 412),
    }


def test_process_events_under_requires_lists() -> None:
    with pytest.raises(InvalidInput):
        process_events_under(None, [])


def test_sort_order_keeps_id_types_apart() -> None:
    items = [ev("1", 0, 60), ev(1, 0, 60)]

    assert [e["id"] for e in sorted(items, key=start_end_key)] == [1, "1"]
    assert [e["id"] for e in sorted(reversed(items), key=start_end_key)] == [1, "1"]


def test_get_events_under_pinned_event_stays_in_columns() -> None:
    items = working(ev(1, 0, 60), ev(2, 30, 90), ev(3, 70, 120))

    primary, under = get_events_under(items, pinned={3})

    assert [e["id"] for e in primary] == [1, 2, 3]
    assert under == []
    assert [e["collisions"] for e in primary] == [[1], [0, 2], [1]]


def test_process_events_under_ignores_right_neighbor_left_of_window() -> None:
    # 2 opens a new full-width run, so it is not a right-hand cap for 1
    items = working(ev(0, 30, 90), ev(1, 140, 300), ev(2, 240, 400), ev(3, 0, 180))
    primary, under = get_events_under(items)
    set_layout_params(primary, 10, 620)

    process_events_under(under, primary)

    assert [(e["id"], e["top_event_id"]) for e in under] == [(1, 0)]
    assert (under[0]["left"], under[0]["width"]) == (320, 310)
    assert misplaced_events_under(under, primary, 10, 620) == {1}


def test_misplaced_events_under_flags_overlap_with_later_run() -> None:
    items = working(ev(0, 270, 430), ev(1, 230, 420), ev(2, 110, 190), ev(3, 180, 250))
    primary, under = get_events_under(items)
    set_layout_params(primary, 10, 620)
    process_events_under(under, primary)

    assert [e["id"] for e in primary] == [2, 3, 0]
    assert {e["id"]: (e["left"], e["width"]) for e in primary + under} == {
        2: (10, 310),
        3: (320, 310),
        0: (10, 620),
        1: (10, 310),
    }
    assert misplaced_events_under(under, primary, 10, 620) == {1}


def test_misplaced_events_under_accepts_fitting_windows() -> None:
    items = working(
        ev(1, 0, 180), ev(2, 0, 60), ev(3, 0, 60), ev(4, 60, 120), ev(5, 120, 180)
    )
    primary, under = get_events_under(items)
    set_layout_params(primary, 10, 620)
    process_events_under(under, primary)

    assert misplaced_events_under(under, primary, 10, 620) == set()
