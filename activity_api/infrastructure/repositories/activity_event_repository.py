"""Append-only persistence and grouping queries for activity events."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy import case, distinct, func, or_, select, true
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query, Session

from activity_api.domain.entities import (
    BUTTON_CLICK,
    LOGIN,
    PAGE_VIEW,
    SCROLL,
    ActionInfo,
    ActivityEvent,
    ActivityFilter,
    ActivityTypeCount,
    CourseInfo,
    DeviceInfo,
    InteractionStats,
    LocationInfo,
    PageInfo,
    ScrollInfo,
    TopPage,
    UserActivitySummary,
)
from activity_api.domain.errors import Unavailable
from activity_api.infrastructure.models import ActivityEventModel, UserModel
from activity_api.utils import ensure_app_naive_datetime, ensure_app_timezone

logger = logging.getLogger(__name__)

_SUMMARY_ORDERINGS = ("last_seen", "activity_count")


class ActivityEventRepository:
    """Store :class:`ActivityEvent` records and answer filtered queries.

    Events are only ever inserted. Every read accepts an :class:`ActivityFilter`
    and applies it through :meth:`_apply_filter`, so listings, counts and
    grouped projections built from the same filter see the same rows.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- writes -----------------------------------------------------------

    def add(self, event: ActivityEvent) -> ActivityEvent:
        """Persist a single event and return it with its assigned ``id``."""

        return self.add_many([event])[0]

    def add_many(self, events: Sequence[ActivityEvent]) -> list[ActivityEvent]:
        """Persist ``events`` in one transaction: either all rows or none."""

        if not events:
            return []

        models = [self._to_model(event) for event in events]
        with self._guard("insert activity events"):
            try:
                self.session.add_all(models)
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
            for model in models:
                self.session.refresh(model)
        return [self._to_entity(model) for model in models]

    # -- listings ---------------------------------------------------------

    def list(
        self,
        flt: ActivityFilter,
        *,
        offset: int = 0,
        limit: int | None = None,
        newest_first: bool = True,
    ) -> list[ActivityEvent]:
        query = self._apply_filter(self.session.query(ActivityEventModel), flt)
        if newest_first:
            query = query.order_by(
                ActivityEventModel.timestamp.desc(), ActivityEventModel.id.desc()
            )
        else:
            query = query.order_by(
                ActivityEventModel.timestamp.asc(), ActivityEventModel.id.asc()
            )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        with self._guard("list activity events"):
            return [self._to_entity(model) for model in query.all()]

    def list_chronological(self, flt: ActivityFilter) -> list[ActivityEvent]:
        """Return every matching event ordered by ``timestamp`` then write order."""

        return self.list(flt, newest_first=False)

    def count(self, flt: ActivityFilter) -> int:
        query = self._apply_filter(
            self.session.query(func.count(ActivityEventModel.id)), flt
        )
        with self._guard("count activity events"):
            return int(query.scalar() or 0)

    # -- grouping ---------------------------------------------------------

    def count_by_activity_type(
        self, flt: ActivityFilter, *, limit: int | None = None
    ) -> list[ActivityTypeCount]:
        """Return event counts per type, highest count first."""

        count_column = func.count(ActivityEventModel.id)
        query = self._apply_filter(
            self.session.query(
                ActivityEventModel.activity_type, count_column.label("count")
            ),
            flt,
        )
        query = query.group_by(ActivityEventModel.activity_type).order_by(
            count_column.desc(), ActivityEventModel.activity_type.asc()
        )
        if limit is not None:
            query = query.limit(limit)
        with self._guard("group activity events by type"):
            rows = query.all()
        return [
            ActivityTypeCount(activity_type=row.activity_type, count=int(row.count))
            for row in rows
        ]

    def top_pages(self, flt: ActivityFilter, *, limit: int = 10) -> list[TopPage]:
        """Group ``page_view`` events by path with visit count and mean duration."""

        count_column = func.count(ActivityEventModel.id)
        query = self._apply_filter(
            self.session.query(
                ActivityEventModel.page_path.label("path"),
                func.max(ActivityEventModel.page_title).label("title"),
                count_column.label("count"),
                func.avg(ActivityEventModel.duration).label("avg_duration"),
            ),
            flt,
        )
        query = (
            query.filter(ActivityEventModel.activity_type == PAGE_VIEW)
            .group_by(ActivityEventModel.page_path)
            .order_by(count_column.desc(), ActivityEventModel.page_path.asc())
            .limit(limit)
        )
        with self._guard("group page views by path"):
            rows = query.all()
        return [
            TopPage(
                path=row.path,
                title=row.title,
                count=int(row.count),
                avg_duration=float(row.avg_duration)
                if row.avg_duration is not None
                else None,
            )
            for row in rows
        ]

    def count_distinct_users(self, flt: ActivityFilter) -> int:
        query = self._apply_filter(
            self.session.query(func.count(distinct(ActivityEventModel.user_id))), flt
        )
        with self._guard("count distinct users"):
            return int(query.scalar() or 0)

    def count_distinct_client_sessions(self, flt: ActivityFilter) -> int:
        """Count unique session ids that were supplied by clients."""

        query = self._apply_filter(
            self.session.query(func.count(distinct(_client_session_column()))), flt
        )
        with self._guard("count distinct sessions"):
            return int(query.scalar() or 0)

    def average_duration(self, flt: ActivityFilter) -> float:
        """Mean ``duration`` of matching events that carry one, ``0`` otherwise."""

        query = self._apply_filter(
            self.session.query(func.avg(ActivityEventModel.duration)), flt
        )
        with self._guard("average activity duration"):
            value = query.scalar()
        return float(value) if value is not None else 0.0

    def interaction_stats(self, flt: ActivityFilter) -> InteractionStats:
        """Return the interaction counters shown on the per-user detail view."""

        m = ActivityEventModel
        query = self._apply_filter(
            self.session.query(
                func.count(m.id).label("total"),
                func.count(distinct(_client_session_column())).label("sessions"),
                _count_type(PAGE_VIEW).label("page_views"),
                _count_type(LOGIN).label("logins"),
                _count_type(SCROLL).label("scrolls"),
                _count_type(BUTTON_CLICK).label("clicks"),
                func.coalesce(func.sum(m.duration), 0).label("total_duration"),
                func.avg(func.coalesce(m.duration, 0)).label("avg_duration"),
            ),
            flt,
        )
        with self._guard("compute interaction stats"):
            row = query.one()
        return InteractionStats(
            total_activities=int(row.total or 0),
            session_count=int(row.sessions or 0),
            total_page_views=int(row.page_views or 0),
            total_logins=int(row.logins or 0),
            total_scrolls=int(row.scrolls or 0),
            total_clicks=int(row.clicks or 0),
            total_duration=float(row.total_duration or 0),
            avg_duration=float(round(float(row.avg_duration or 0))),
        )

    def summarize_by_user(
        self,
        flt: ActivityFilter,
        *,
        order_by: str = "last_seen",
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[UserActivitySummary], int]:
        """Return one aggregated row per directory user and the number of such users.

        ``order_by`` is either ``"last_seen"`` (roster) or ``"activity_count"``
        (leaderboard). Events of users missing from the directory are left out.
        """

        if order_by not in _SUMMARY_ORDERINGS:
            raise ValueError(f"Unsupported ordering '{order_by}'")

        m = ActivityEventModel
        grouped = self._apply_filter(
            self.session.query(
                m.user_id.label("user_id"),
                func.count(m.id).label("total_activities"),
                func.count(distinct(_client_session_column())).label("session_count"),
                func.min(m.timestamp).label("first_seen"),
                func.max(m.timestamp).label("last_seen"),
                _count_type(PAGE_VIEW).label("page_views"),
                _count_type(LOGIN).label("logins"),
                _count_type(SCROLL).label("scrolls"),
                _count_type(BUTTON_CLICK).label("clicks"),
                func.coalesce(func.sum(m.duration), 0).label("total_duration"),
            ),
            flt,
        ).group_by(m.user_id)

        with self._guard("summarize activity by user"):
            summary = grouped.subquery()
            query = self.session.query(
                summary, UserModel.name, UserModel.email, UserModel.role
            ).join(UserModel, UserModel.id == summary.c.user_id)
            total = query.count()
            if order_by == "last_seen":
                query = query.order_by(
                    summary.c.last_seen.desc(), summary.c.user_id.asc()
                )
            else:
                query = query.order_by(
                    summary.c.total_activities.desc(), summary.c.user_id.asc()
                )
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            rows = query.all()
            types_by_user = self._activity_types_by_user(
                flt, [row.user_id for row in rows]
            )

        summaries = [
            UserActivitySummary(
                user_id=row.user_id,
                name=row.name,
                email=row.email,
                role=row.role,
                total_activities=int(row.total_activities),
                session_count=int(row.session_count or 0),
                first_seen=ensure_app_timezone(row.first_seen),
                last_seen=ensure_app_timezone(row.last_seen),
                page_views=int(row.page_views or 0),
                logins=int(row.logins or 0),
                scrolls=int(row.scrolls or 0),
                clicks=int(row.clicks or 0),
                total_duration=float(row.total_duration or 0),
                activity_types=types_by_user.get(row.user_id, []),
            )
            for row in rows
        ]
        return summaries, total

    def _activity_types_by_user(
        self, flt: ActivityFilter, user_ids: Sequence[int]
    ) -> dict[int, list[str]]:
        if not user_ids:
            return {}
        query = self._apply_filter(
            self.session.query(
                ActivityEventModel.user_id, ActivityEventModel.activity_type
            ).distinct(),
            flt,
        ).filter(ActivityEventModel.user_id.in_(list(user_ids)))
        types: dict[int, list[str]] = defaultdict(list)
        for user_id, activity_type in query.all():
            types[user_id].append(activity_type)
        return {user_id: sorted(values) for user_id, values in types.items()}

    # -- helpers ----------------------------------------------------------

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate connectivity failures into :class:`Unavailable`."""

        try:
            yield
        except OperationalError as exc:
            self.session.rollback()
            logger.exception("Event store unavailable while trying to %s", operation)
            raise Unavailable("Activity store is unavailable") from exc

    @staticmethod
    def _apply_filter(query: Query, flt: ActivityFilter) -> Query:
        m = ActivityEventModel
        if flt.user_id is not None:
            query = query.filter(m.user_id == flt.user_id)
        if flt.start is not None:
            query = query.filter(m.timestamp >= ensure_app_naive_datetime(flt.start))
        if flt.end is not None:
            query = query.filter(m.timestamp <= ensure_app_naive_datetime(flt.end))
        if flt.activity_type:
            query = query.filter(m.activity_type == flt.activity_type)
        if flt.search:
            term = flt.search.strip()
            if term:
                query = query.filter(
                    or_(
                        m.page_path.icontains(term, autoescape=True),
                        m.page_title.icontains(term, autoescape=True),
                        m.action_element.icontains(term, autoescape=True),
                        m.action_value.icontains(term, autoescape=True),
                    )
                )
        if flt.user_search:
            term = flt.user_search.strip()
            if term:
                matching_users = select(UserModel.id).where(
                    or_(
                        UserModel.name.icontains(term, autoescape=True),
                        UserModel.email.icontains(term, autoescape=True),
                    )
                )
                query = query.filter(m.user_id.in_(matching_users))
        return query

    @staticmethod
    def _to_model(event: ActivityEvent) -> ActivityEventModel:
        model = ActivityEventModel(
            user_id=event.user_id,
            session_id=event.session_id,
            session_id_supplied=event.session_id_supplied,
            activity_type=event.activity_type,
            duration=event.duration,
            timestamp=ensure_app_naive_datetime(event.timestamp),
        )
        if event.page is not None:
            model.page_path = event.page.path
            model.page_title = event.page.title
            model.page_referrer = event.page.referrer
        if event.action is not None:
            model.action_element = event.action.element
            model.action_value = event.action.value
            model.action_metadata = dict(event.action.metadata) or None
        if event.scroll is not None:
            model.scroll_depth = event.scroll.depth
            model.scroll_max_depth = event.scroll.max_depth
        if event.course is not None:
            model.course_id = event.course.course_id
            model.course_name = event.course.course_name
            model.course_section = event.course.section
            model.course_progress = event.course.progress
        if event.device is not None:
            model.device_user_agent = event.device.user_agent
            model.device_platform = event.device.platform
            model.device_is_mobile = event.device.is_mobile
            model.device_screen_width = event.device.screen_width
            model.device_screen_height = event.device.screen_height
        if event.location is not None:
            model.location_ip = event.location.ip
            model.location_country = event.location.country
            model.location_city = event.location.city
        return model

    @staticmethod
    def _to_entity(model: ActivityEventModel) -> ActivityEvent:
        page = None
        if any((model.page_path, model.page_title, model.page_referrer)):
            page = PageInfo(
                path=model.page_path,
                title=model.page_title,
                referrer=model.page_referrer,
            )
        action = None
        if model.action_element or model.action_value or model.action_metadata:
            action = ActionInfo(
                element=model.action_element,
                value=model.action_value,
                metadata=dict(model.action_metadata or {}),
            )
        scroll = None
        if model.scroll_depth is not None or model.scroll_max_depth is not None:
            scroll = ScrollInfo(depth=model.scroll_depth, max_depth=model.scroll_max_depth)
        course = None
        if any(
            value is not None
            for value in (
                model.course_id,
                model.course_name,
                model.course_section,
                model.course_progress,
            )
        ):
            course = CourseInfo(
                course_id=model.course_id,
                course_name=model.course_name,
                section=model.course_section,
                progress=model.course_progress,
            )
        device = None
        if any(
            value is not None
            for value in (
                model.device_user_agent,
                model.device_platform,
                model.device_is_mobile,
                model.device_screen_width,
                model.device_screen_height,
            )
        ):
            device = DeviceInfo(
                user_agent=model.device_user_agent,
                platform=model.device_platform,
                is_mobile=model.device_is_mobile,
                screen_width=model.device_screen_width,
                screen_height=model.device_screen_height,
            )
        location = None
        if any((model.location_ip, model.location_country, model.location_city)):
            location = LocationInfo(
                ip=model.location_ip,
                country=model.location_country,
                city=model.location_city,
            )
        return ActivityEvent(
            id=model.id,
            user_id=model.user_id,
            session_id=model.session_id,
            session_id_supplied=bool(model.session_id_supplied),
            activity_type=model.activity_type,
            timestamp=ensure_app_timezone(model.timestamp),
            page=page,
            action=action,
            scroll=scroll,
            course=course,
            device=device,
            location=location,
            duration=model.duration,
        )


def _client_session_column():
    """Session id when supplied by the client, ``NULL`` otherwise."""

    return case(
        (ActivityEventModel.session_id_supplied == true(), ActivityEventModel.session_id)
    )


def _count_type(activity_type: str):
    return func.sum(case((ActivityEventModel.activity_type == activity_type, 1), else_=0))


__all__ = ["ActivityEventRepository"]
