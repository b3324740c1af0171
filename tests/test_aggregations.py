"""Tests for the histogram, engagement and grouping projections."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from conftest import BASE_TIME, make_event, store

from activity_api.application.use_cases.activity import (
    daily_histogram,
    daily_trends,
    engagement_summary,
    get_leaderboard,
    get_platform_feed,
    get_platform_totals,
    get_user_activity_detail,
    get_user_stats,
    hourly_histogram,
    list_user_roster,
)
from activity_api.domain.entities import ActivityFilter
from activity_api.domain.errors import InvalidArgument, NotFound
from activity_api.infrastructure.repositories import ActivityEventRepository


def test_hourly_histogram_only_lists_hours_with_events() -> None:
    events = [make_event(0), make_event(10), make_event(120), make_event(60 * 14)]

    histogram = hourly_histogram(events)

    assert [(row.hour, row.count) for row in histogram] == [(9, 2), (11, 1), (23, 1)]


def test_daily_histogram_is_ordered_by_day() -> None:
    events = [make_event(60 * 24 * 2), make_event(0), make_event(5)]

    histogram = daily_histogram(events)

    assert [(row.day, row.count) for row in histogram] == [
        (date(2024, 3, 4), 2),
        (date(2024, 3, 6), 1),
    ]


def test_daily_trends_group_by_day_and_type() -> None:
    events = [
        make_event(0, activity_type="scroll"),
        make_event(1, activity_type="page_view"),
        make_event(2, activity_type="page_view"),
        make_event(60 * 24, activity_type="login"),
    ]

    trends = daily_trends(events)

    assert [(row.day, row.activity_type, row.count) for row in trends] == [
        (date(2024, 3, 4), "page_view", 2),
        (date(2024, 3, 4), "scroll", 1),
        (date(2024, 3, 5), "login", 1),
    ]


def test_engagement_summary_averages_page_view_duration() -> None:
    events = [
        make_event(0, path="/a", duration=10, session_id="tab-1"),
        make_event(1, path="/a", duration=20, session_id="tab-1"),
        make_event(2, path="/a", duration=30, session_id="tab-2"),
        make_event(3, activity_type="scroll", duration=5000),
    ]

    (day,) = engagement_summary(events)

    assert day.day == date(2024, 3, 4)
    assert day.page_view_count == 3
    assert day.distinct_session_count == 2
    assert day.mean_duration_seconds == pytest.approx(0.02)


def test_engagement_summary_without_page_views_is_zero() -> None:
    (day,) = engagement_summary([make_event(0, activity_type="login")])

    assert day.page_view_count == 0
    assert day.mean_duration_seconds == 0
    assert day.distinct_session_count == 0


def test_top_pages_rank_by_views(db_session, users) -> None:
    store(
        db_session,
        make_event(0, path="/a", duration=10),
        make_event(1, path="/a", duration=20),
        make_event(2, path="/a", duration=30),
        make_event(3, path="/b"),
        make_event(4, path="/b"),
        make_event(5, path="/c", activity_type="button_click"),
    )

    pages = ActivityEventRepository(db_session).top_pages(ActivityFilter(user_id=1))

    assert [(page.path, page.count) for page in pages] == [("/a", 3), ("/b", 2)]
    assert pages[0].avg_duration == pytest.approx(20)
    assert pages[0].title == "Page /a"
    assert pages[1].avg_duration is None


def test_type_breakdown_sums_to_total(db_session, users) -> None:
    store(
        db_session,
        make_event(0, activity_type="page_view"),
        make_event(1, activity_type="page_view"),
        make_event(2, activity_type="scroll"),
        make_event(3, activity_type="login"),
        make_event(4, activity_type="login", user_id=2),
    )
    repository = ActivityEventRepository(db_session)
    flt = ActivityFilter(user_id=1)

    breakdown = repository.count_by_activity_type(flt)

    assert [(row.activity_type, row.count) for row in breakdown] == [
        ("page_view", 2),
        ("login", 1),
        ("scroll", 1),
    ]
    assert sum(row.count for row in breakdown) == repository.count(flt)


def test_search_matches_page_and_action_fields(db_session, users) -> None:
    store(
        db_session,
        make_event(0, path="/courses/python"),
        make_event(1, path="/home"),
        make_event(2, path="/100%_off"),
    )
    repository = ActivityEventRepository(db_session)

    assert repository.count(ActivityFilter(user_id=1, search="PYTHON")) == 1
    assert repository.count(ActivityFilter(user_id=1, search="%")) == 1


def test_user_stats_cover_the_same_events_as_the_journey(db_session, users) -> None:
    store(
        db_session,
        make_event(0, path="/a", duration=1000, session_id="tab-1"),
        make_event(1, activity_type="scroll", session_id="tab-1"),
        make_event(60, path="/b", duration=3000, session_id="tab-2"),
        make_event(61, activity_type="login"),
    )

    stats = get_user_stats(
        db_session, user_id=1, reference=BASE_TIME + timedelta(days=1)
    )

    assert stats.total_activities == 4
    assert stats.total_sessions == 2
    assert sum(row.count for row in stats.activity_breakdown) == 4
    assert [page.path for page in stats.top_pages] == ["/a", "/b"]
    (day,) = stats.engagement
    assert day.page_view_count == 2
    assert day.mean_duration_seconds == pytest.approx(2.0)


def test_user_stats_engagement_is_limited_to_trailing_window(db_session, users) -> None:
    store(db_session, make_event(0, path="/a"), make_event(60 * 24 * 40, path="/b"))

    stats = get_user_stats(
        db_session, user_id=1, reference=BASE_TIME + timedelta(days=41)
    )

    assert stats.total_activities == 2
    assert [day.day for day in stats.engagement] == [date(2024, 4, 13)]


def test_empty_user_stats_are_zero(db_session, users) -> None:
    stats = get_user_stats(db_session, user_id=1)

    assert stats.total_activities == 0
    assert stats.total_sessions == 0
    assert stats.activity_breakdown == []
    assert stats.engagement == []
    assert stats.top_pages == []


def test_user_detail_uses_one_filter_for_every_projection(db_session, users) -> None:
    store(
        db_session,
        make_event(0, path="/a", duration=100, session_id="tab-1"),
        make_event(5, activity_type="button_click", session_id="tab-1"),
        make_event(60 * 24, activity_type="login", session_id="tab-2"),
        make_event(0, user_id=2, path="/z"),
    )

    detail = get_user_activity_detail(db_session, user_id=1, page=1, limit=2)

    assert detail.user.email == "alice@example.com"
    assert detail.stats.total_activities == 3
    assert detail.stats.session_count == 2
    assert detail.stats.total_clicks == 1
    assert sum(row.count for row in detail.activity_by_hour) == 3
    assert sum(row.count for row in detail.activity_by_day) == 3
    assert detail.timeline.total == 3
    assert detail.timeline.total_pages == 2
    assert [event.activity_type for event in detail.timeline.items] == [
        "login",
        "button_click",
    ]


def test_user_detail_timeline_pages_newest_first(db_session, users) -> None:
    store(
        db_session,
        *(make_event(minute, path=f"/p{minute}") for minute in range(5)),
    )

    first = get_user_activity_detail(db_session, user_id=1, page=1, limit=2)
    last = get_user_activity_detail(db_session, user_id=1, page=3, limit=2)

    assert [event.page.path for event in first.timeline.items] == ["/p4", "/p3"]
    assert [event.page.path for event in last.timeline.items] == ["/p0"]
    assert last.timeline.total == 5
    assert last.timeline.total_pages == 3
    assert sum(row.count for row in last.activity_by_hour) == 5


def test_user_aggregations_are_stable_on_unchanged_data(db_session, users) -> None:
    store(
        db_session,
        make_event(0, path="/a", duration=1200, session_id="tab-1"),
        make_event(3, path="/b", duration=800, session_id="tab-1"),
        make_event(70, activity_type="scroll", session_id="tab-2"),
        make_event(60 * 24, activity_type="login"),
    )
    reference = BASE_TIME + timedelta(days=2)

    stats = get_user_stats(db_session, user_id=1, reference=reference)
    detail = get_user_activity_detail(db_session, user_id=1, limit=2)

    assert get_user_stats(db_session, user_id=1, reference=reference) == stats
    assert get_user_activity_detail(db_session, user_id=1, limit=2) == detail
    assert stats.total_activities == 4


def test_user_detail_for_unknown_user_raises(db_session) -> None:
    with pytest.raises(NotFound):
        get_user_activity_detail(db_session, user_id=404)


def test_roster_orders_by_last_seen_and_counts_client_sessions(db_session, users) -> None:
    store(
        db_session,
        make_event(0, user_id=1, session_id="tab-1"),
        make_event(1, user_id=1, session_id="tab-1", activity_type="scroll"),
        make_event(2, user_id=1),
        make_event(90, user_id=2, activity_type="login", session_id="tab-9"),
    )

    roster = list_user_roster(db_session)

    assert roster.total == 2
    assert roster.total_pages == 1
    first, second = roster.items
    assert first.user_id == 2
    assert first.logins == 1
    assert second.user_id == 1
    assert second.total_activities == 3
    assert second.session_count == 1
    assert second.page_views == 2
    assert second.activity_types == ["page_view", "scroll"]
    assert second.name == "Alice Moreno"


def test_roster_search_filters_by_user(db_session, users) -> None:
    store(db_session, make_event(0, user_id=1), make_event(0, user_id=2))

    roster = list_user_roster(db_session, search="bob")

    assert [row.user_id for row in roster.items] == [2]


def test_roster_skips_users_missing_from_the_directory(db_session, users) -> None:
    store(db_session, make_event(0, user_id=1), make_event(5, user_id=77))

    roster = list_user_roster(db_session)

    assert roster.total == 1
    assert [row.user_id for row in roster.items] == [1]


def test_roster_rejects_invalid_pagination(db_session) -> None:
    with pytest.raises(InvalidArgument):
        list_user_roster(db_session, page=0)


def test_leaderboard_orders_by_activity_count(db_session, users) -> None:
    store(
        db_session,
        make_event(0, user_id=1),
        make_event(1, user_id=2),
        make_event(2, user_id=2),
        make_event(3, user_id=77),
    )

    leaders = get_leaderboard(db_session)

    assert [(row.user_id, row.total_activities) for row in leaders] == [(2, 2), (1, 1)]
    assert [row.name for row in leaders] == ["Bob Stone", "Alice Moreno"]


def test_platform_feed_stats_share_the_feed_filter(db_session, users) -> None:
    store(
        db_session,
        make_event(0, user_id=1, duration=100),
        make_event(1, user_id=1, activity_type="scroll", duration=300),
        make_event(2, user_id=2),
    )

    feed = get_platform_feed(db_session, activity_type="page_view", limit=1)

    assert feed.events.total == 2
    assert len(feed.events.items) == 1
    assert feed.stats.total_activities == 2
    assert feed.stats.unique_users == 2
    assert feed.stats.avg_duration == pytest.approx(100)
    assert [(row.activity_type, row.count) for row in feed.stats.top_actions] == [
        ("page_view", 2)
    ]


def test_platform_feed_rejects_unknown_activity_type(db_session) -> None:
    with pytest.raises(InvalidArgument):
        get_platform_feed(db_session, activity_type="teleport")


def test_platform_totals(db_session, users) -> None:
    store(db_session, make_event(0, user_id=1), make_event(1, user_id=2))

    totals = get_platform_totals(db_session)

    assert totals.total_activities == 2
    assert totals.unique_users == 2
