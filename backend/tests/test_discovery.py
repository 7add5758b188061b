import math
from datetime import datetime, timezone

import pytest

from discovery import format_distance, rank_events
from geo import EARTH_RADIUS_MILES
from models import EventFilters, VerificationStatus

from conftest import CHARLOTTE, make_event


def north_of_viewer(miles: float) -> str:
    """Latitude string `miles` due north of the viewer."""
    return f"{CHARLOTTE[0] + math.degrees(miles / EARTH_RADIUS_MILES):.6f}"


def rank(events, **filters):
    return rank_events(events, CHARLOTTE[0], CHARLOTTE[1], EventFilters(**filters))


def test_same_coordinates_distance_zero():
    result = rank([make_event()])
    assert len(result) == 1
    assert result[0].distance == pytest.approx(0.0, abs=1e-6)


def test_radius_excludes_events_beyond():
    near = make_event(id="near", lat=north_of_viewer(1.9))
    far = make_event(id="far", lat=north_of_viewer(2.5))

    result = rank([far, near], radius=2)

    assert [r.event.id for r in result] == ["near"]
    assert result[0].distance == pytest.approx(1.9, abs=1e-3)


def test_default_radius_is_two_miles():
    assert EventFilters().radius == 2


def test_sorted_by_distance():
    events = [
        make_event(id="c", lat=north_of_viewer(1.5)),
        make_event(id="a", lat=north_of_viewer(0.2)),
        make_event(id="b", lat=north_of_viewer(0.9)),
    ]
    assert [r.event.id for r in rank(events)] == ["a", "b", "c"]


def test_ties_keep_input_order():
    events = [make_event(id=name) for name in ("first", "second", "third")]
    assert [r.event.id for r in rank(events)] == ["first", "second", "third"]


def test_search_is_case_insensitive_across_fields():
    by_title = make_event(id="title", title="Jazz In The Park")
    by_location = make_event(id="loc", location_name="JAZZ Room")
    by_description = make_event(id="desc", description="An evening of smooth jazz on the lawn.")
    neither = make_event(id="none")

    result = rank([by_title, by_location, by_description, neither], search="jazz")

    assert {r.event.id for r in result} == {"title", "loc", "desc"}


def test_search_match_still_needs_verified_when_verified_only():
    event = make_event(title="Jazz In The Park", verification_status=VerificationStatus.UNVERIFIED)
    assert rank([event], search="jazz", verified_only=True) == []

    verified = event.model_copy(update={"verification_status": VerificationStatus.VERIFIED})
    assert len(rank([verified], search="jazz", verified_only=True)) == 1


def test_verified_only_false_lets_everything_through():
    events = [
        make_event(id="u"),
        make_event(id="f", verification_status=VerificationStatus.FLAGGED),
    ]
    assert len(rank(events, verified_only=False)) == 2


def test_date_window_is_inclusive_on_start():
    start = datetime(2025, 10, 18, 13, 0, tzinfo=timezone.utc)
    event = make_event(start_datetime=start)

    assert len(rank([event], start_date=start, end_date=start)) == 1
    assert rank([event], start_date=datetime(2025, 10, 19, tzinfo=timezone.utc)) == []
    assert rank([event], end_date=datetime(2025, 10, 17, tzinfo=timezone.utc)) == []


def test_naive_date_bounds_are_utc():
    event = make_event(start_datetime=datetime(2025, 10, 18, 13, 0, tzinfo=timezone.utc))
    assert len(rank([event], start_date=datetime(2025, 10, 18, 13, 0))) == 1
    assert rank([event], start_date=datetime(2025, 10, 18, 13, 1)) == []


@pytest.mark.parametrize("field", ["is_free", "is_family_friendly", "is_outdoor"])
def test_boolean_flags_must_match_exactly(field):
    yes = make_event(id="yes", **{field: True})
    no = make_event(id="no", **{field: False})

    assert [r.event.id for r in rank([yes, no], **{field: True})] == ["yes"]
    assert [r.event.id for r in rank([yes, no], **{field: False})] == ["no"]
    assert len(rank([yes, no], **{field: None})) == 2


def test_neighborhood_and_tags():
    dilworth = make_event(id="d", neighborhood="Dilworth", tags=["music", "outdoor"])
    noda = make_event(id="n", neighborhood="NoDa", tags=["art"])

    assert [r.event.id for r in rank([dilworth, noda], neighborhood="dilworth")] == ["d"]
    assert [r.event.id for r in rank([dilworth, noda], tags=["ART", "food"])] == ["n"]
    assert len(rank([dilworth, noda], tags=[])) == 2


def test_all_predicates_are_anded():
    event = make_event(is_free=True, is_outdoor=False, title="Chess Club Meetup")
    assert len(rank([event], search="chess", is_free=True)) == 1
    assert rank([event], search="chess", is_free=True, is_outdoor=True) == []


def test_radius_bounds_validated():
    with pytest.raises(ValueError):
        EventFilters(radius=0.5)
    with pytest.raises(ValueError):
        EventFilters(radius=11)


def test_each_call_recomputes():
    events = [make_event()]
    first = rank(events)
    second = rank(events)
    assert first == second
    assert first is not second


def test_format_distance():
    assert format_distance(1.234) == "1.2 mi"


def test_whitespace_search_is_a_real_substring():
    spaced = make_event(id="spaced", title="Jazz   Night Out")
    plain = make_event(id="plain", title="Jazz-Night-Out", description="Smooth-jazz-on-the-lawn-all-evening.")

    assert [r.event.id for r in rank([spaced, plain], search="   ")] == ["spaced"]
    assert len(rank([spaced, plain], search="")) == 2
