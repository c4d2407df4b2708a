from datetime import date

import pytest

from rallymaster.core.errors import ValidationError
from rallymaster.models import ParticipantRole
from rallymaster.services.rally_search import (
    country_predicate,
    date_overlap_predicate,
    name_predicate,
    proximity_predicate,
    region_predicate,
    search_rallies,
)

BUFFALO = (42.8864, -78.8784)
ROCHESTER = (43.1566, -77.6088)
NEW_YORK = (40.7128, -74.0060)


def _names(page):
    return [rally.name for rally in page.items]


def test_absent_inputs_build_no_predicate():
    assert name_predicate(None) is None
    assert name_predicate("   ") is None
    assert date_overlap_predicate(None, None) is None
    assert country_predicate("") is None
    assert region_predicate(None) is None
    assert proximity_predicate(None, None, None) is None
    assert proximity_predicate(42.0, None, 50.0) is None
    assert proximity_predicate(42.0, -78.0, 0.0) is None


def test_proximity_defaults_to_100_miles():
    proximity = proximity_predicate(*BUFFALO, None)
    assert proximity is not None
    assert proximity.radius_miles == 100.0


def test_no_filters_returns_everything_by_start_date(session, make_rally):
    make_rally(name="Late", start_date=date(2024, 9, 1), end_date=date(2024, 9, 3))
    make_rally(name="Early", start_date=date(2024, 3, 1), end_date=date(2024, 3, 2))
    make_rally(name="Middle", start_date=date(2024, 6, 1), end_date=date(2024, 6, 5))

    page = search_rallies(session)

    assert _names(page) == ["Early", "Middle", "Late"]
    assert page.total == 3


def test_name_is_case_insensitive_substring(session, make_rally):
    make_rally(name="Iron Butt Rally")
    make_rally(name="Team Strange Grand Tour")

    assert _names(search_rallies(session, name="iron butt")) == ["Iron Butt Rally"]
    assert _names(search_rallies(session, name="STRANGE")) == ["Team Strange Grand Tour"]


def test_name_treats_wildcards_literally(session, make_rally):
    make_rally(name="100% Rally")
    make_rally(name="Other Rally")

    assert _names(search_rallies(session, name="100%")) == ["100% Rally"]
    assert _names(search_rallies(session, name="%")) == ["100% Rally"]


def test_date_window_overlap(session, make_rally):
    make_rally(name="June", start_date=date(2024, 6, 1), end_date=date(2024, 6, 5))

    overlapping = search_rallies(session, date_from=date(2024, 6, 4), date_to=date(2024, 6, 10))
    after = search_rallies(session, date_from=date(2024, 6, 10), date_to=date(2024, 6, 20))

    assert _names(overlapping) == ["June"]
    assert _names(after) == []


def test_date_window_is_inclusive_at_both_ends(session, make_rally):
    make_rally(name="June", start_date=date(2024, 6, 1), end_date=date(2024, 6, 5))

    assert _names(search_rallies(session, date_from=date(2024, 6, 5), date_to=date(2024, 6, 9)))
    assert _names(search_rallies(session, date_from=date(2024, 5, 20), date_to=date(2024, 6, 1)))


def test_open_ended_date_windows(session, make_rally):
    make_rally(name="Spring", start_date=date(2024, 4, 1), end_date=date(2024, 4, 3))
    make_rally(name="Summer", start_date=date(2024, 7, 1), end_date=date(2024, 7, 4))

    assert _names(search_rallies(session, date_from=date(2024, 4, 3))) == ["Spring", "Summer"]
    assert _names(search_rallies(session, date_from=date(2024, 4, 4))) == ["Summer"]
    assert _names(search_rallies(session, date_to=date(2024, 4, 1))) == ["Spring"]
    assert _names(search_rallies(session, date_to=date(2024, 3, 31))) == []


def test_inverted_date_window_is_rejected(session):
    with pytest.raises(ValidationError):
        search_rallies(session, date_from=date(2024, 6, 10), date_to=date(2024, 6, 1))


def test_country_matches_code_or_free_text(session, make_rally):
    make_rally(name="Stateside", location_country="United States")
    make_rally(name="Maple", location_country="Canada")
    make_rally(name="Coded", location_country="US")
    make_rally(name="Britannia", location_country="Great Britain", country_code=None)

    assert _names(search_rallies(session, country="usa")) == ["Stateside", "Coded"]
    assert _names(search_rallies(session, country="United States")) == ["Stateside", "Coded"]
    assert _names(search_rallies(session, country="can")) == ["Maple"]
    assert _names(search_rallies(session, country="brit")) == ["Britannia"]


def test_region_is_substring_of_state(session, make_rally):
    make_rally(name="West", location_state="California")
    make_rally(name="East", location_state="NY")

    assert _names(search_rallies(session, region="calif")) == ["West"]
    assert _names(search_rallies(session, region="ny")) == ["East"]


def test_proximity_uses_precise_distance(session, make_rally):
    make_rally(name="Buffalo", latitude=BUFFALO[0], longitude=BUFFALO[1])
    make_rally(name="Rochester", latitude=ROCHESTER[0], longitude=ROCHESTER[1])
    make_rally(name="New York", latitude=NEW_YORK[0], longitude=NEW_YORK[1])
    make_rally(name="Nowhere")

    near = search_rallies(session, near_lat=BUFFALO[0], near_lng=BUFFALO[1], radius_miles=100)
    default_radius = search_rallies(session, near_lat=BUFFALO[0], near_lng=BUFFALO[1])
    wide = search_rallies(session, near_lat=BUFFALO[0], near_lng=BUFFALO[1], radius_miles=400)
    disabled = search_rallies(session, near_lat=BUFFALO[0], near_lng=BUFFALO[1], radius_miles=0)

    assert sorted(_names(near)) == ["Buffalo", "Rochester"]
    assert sorted(_names(default_radius)) == ["Buffalo", "Rochester"]
    assert sorted(_names(wide)) == ["Buffalo", "New York", "Rochester"]
    assert disabled.total == 4


def test_proximity_drops_box_corner_candidates(session, make_rally):
    # Inside the 50-mile box around Buffalo but about 66 miles away.
    make_rally(name="Corner", latitude=BUFFALO[0] + 0.7, longitude=BUFFALO[1] + 0.95)

    page = search_rallies(session, near_lat=BUFFALO[0], near_lng=BUFFALO[1], radius_miles=50)

    assert page.items == []
    assert page.total == 0


def test_predicates_combine_with_and(session, make_rally):
    make_rally(name="Iron Butt East", location_state="NY", start_date=date(2024, 6, 1), end_date=date(2024, 6, 5))
    make_rally(name="Iron Butt West", location_state="CA", start_date=date(2024, 6, 1), end_date=date(2024, 6, 5))
    make_rally(name="Iron Butt Fall", location_state="NY", start_date=date(2024, 10, 1), end_date=date(2024, 10, 5))

    page = search_rallies(
        session, name="iron", region="ny", date_from=date(2024, 6, 1), date_to=date(2024, 6, 30)
    )

    assert _names(page) == ["Iron Butt East"]


def test_pagination_is_stable(session, make_rally):
    for index in range(5):
        make_rally(name=f"Same Day {index}")

    first = search_rallies(session, page=0, size=2)
    second = search_rallies(session, page=1, size=2)
    last = search_rallies(session, page=2, size=2)
    everything = search_rallies(session, unpaged=True)

    assert _names(first) == ["Same Day 0", "Same Day 1"]
    assert _names(second) == ["Same Day 2", "Same Day 3"]
    assert _names(last) == ["Same Day 4"]
    assert first.total == 5 and first.total_pages == 3
    assert len(everything.items) == 5


def test_proximity_results_are_paged_after_filtering(session, make_rally):
    for index in range(3):
        make_rally(name=f"Near {index}", latitude=BUFFALO[0], longitude=BUFFALO[1])
    make_rally(name="Far", latitude=NEW_YORK[0], longitude=NEW_YORK[1])

    page = search_rallies(
        session, near_lat=BUFFALO[0], near_lng=BUFFALO[1], radius_miles=50, page=1, size=2
    )

    assert _names(page) == ["Near 2"]
    assert page.total == 3


def test_invalid_paging_is_rejected(session):
    with pytest.raises(ValidationError):
        search_rallies(session, page=-1)
    with pytest.raises(ValidationError):
        search_rallies(session, size=0)


def test_private_rallies_only_visible_to_roster(session, make_rally, make_member, enroll_member):
    organizer = make_member("organizer@example.com")
    rider = make_member("rider@example.com")
    stranger = make_member("stranger@example.com")
    make_rally(name="Open")
    hidden = make_rally(organizer, name="Invite Only", is_public=False)
    enroll_member(hidden, rider, ParticipantRole.RIDER)

    assert _names(search_rallies(session)) == ["Open"]
    assert _names(search_rallies(session, stranger)) == ["Open"]
    assert _names(search_rallies(session, rider)) == ["Open", "Invite Only"]
    assert _names(search_rallies(session, organizer)) == ["Open", "Invite Only"]
