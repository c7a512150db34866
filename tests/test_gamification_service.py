from datetime import datetime, timezone

import pytest

from fakes import FakeSupabase, FixedClock
from studysync.core.errors import ValidationError
from studysync.models.badge import UserBadgeProgress
from studysync.services.gamification_service import GamificationService
from studysync.services.notifications import BadgeNotifier
from studysync.services.progress_repository import ProgressRepository

USER = "user-1"


class RecordingNotifier(BadgeNotifier):
    def __init__(self):
        self.events = []

    def badge_unlocked(self, user_id, event):
        self.events.append((user_id, event.badge_id))


class ExplodingNotifier(BadgeNotifier):
    def badge_unlocked(self, user_id, event):
        raise RuntimeError("toast service down")


class FlakyRepository(ProgressRepository):
    def __init__(self, db, failing_badge):
        super().__init__(db)
        self.failing_badge = failing_badge

    def save_badge_progress(self, user_id, progress):
        if progress.badge_id == self.failing_badge:
            raise ConnectionError("write failed")
        super().save_badge_progress(user_id, progress)


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(db, clock, notifier):
    return GamificationService(ProgressRepository(db), clock, notifier)


def add_sessions(db, count, user_id=USER):
    for _ in range(count):
        db.add("study_sessions", {"user_id": user_id, "subject_id": "s1"})


def saved_badges(db):
    return {row["badge_id"]: row for row in db.rows("user_badges")}


def test_first_activity_persists_streak_and_unlocks_first_session(db, service, notifier):
    add_sessions(db, 1)

    result = service.record_study_activity(USER)

    assert result["streak"].current_streak == 1
    assert result["outcome"].increased
    streak_row = db.rows("streaks")[0]
    assert streak_row["current_streak"] == 1
    assert streak_row["last_study_date"] == "2024-01-01"
    assert saved_badges(db)["first-session"]["earned_at"] == "2024-01-01T10:00:00+00:00"
    assert notifier.events == [(USER, "first-session")]


def test_second_activity_same_day_changes_nothing(db, service, notifier):
    add_sessions(db, 1)
    service.record_study_activity(USER)
    writes_before = [call for call in db.calls if call[1] == "upsert"]

    result = service.record_study_activity(USER)

    assert not result["outcome"].increased
    assert [call for call in db.calls if call[1] == "upsert"] == writes_before
    assert result["unlocked"] == []
    assert len(notifier.events) == 1


def test_consecutive_days_build_streak_badges(db, service, clock, notifier):
    add_sessions(db, 1)
    for _ in range(3):
        service.record_study_activity(USER)
        clock.advance(hours=23)

    assert service.get_streak(USER).current_streak == 3
    assert ("user-1", "streak-3") in notifier.events
    assert saved_badges(db)["streak-7"]["progress"] == 43


def test_streak_badge_stays_earned_after_break(db, service, clock):
    add_sessions(db, 1)
    for _ in range(3):
        service.record_study_activity(USER)
        clock.advance(hours=23)

    clock.advance(days=5)
    result = service.record_study_activity(USER)

    assert result["outcome"].broken
    badges = {badge.id: badge for badge in service.get_badges(USER)}
    assert badges["streak-3"].progress == 100
    assert badges["streak-3"].earned_at is not None
    assert badges["streak-7"].progress == 14


def test_one_failed_badge_write_does_not_block_the_rest(db, clock, notifier):
    add_sessions(db, 1)
    service = GamificationService(FlakyRepository(db, "first-session"), clock, notifier)

    with pytest.raises(ConnectionError):
        service.evaluate_badges(USER)

    saved = saved_badges(db)
    assert "first-session" not in saved
    assert {"sessions-50", "topics-10", "streak-30"} <= set(saved)
    assert notifier.events == []


def test_notification_failure_does_not_undo_progress(db, clock):
    add_sessions(db, 1)
    service = GamificationService(ProgressRepository(db), clock, ExplodingNotifier())

    evaluation = service.evaluate_badges(USER)

    assert [event.badge_id for event in evaluation.unlocked] == ["first-session"]
    assert saved_badges(db)["first-session"]["progress"] == 100


def test_reset_streak_is_persisted(db, service):
    service.record_study_activity(USER)

    record = service.reset_streak(USER)

    assert record.current_streak == 0
    assert record.longest_streak == 1
    row = db.rows("streaks")[0]
    assert row["current_streak"] == 0
    assert row["last_activity_at"] is None


def test_corrupt_streak_row_fails_fast(db, service):
    db.add("streaks", {"user_id": USER, "current_streak": 5, "longest_streak": 2, "last_activity_at": None})

    with pytest.raises(ValidationError):
        service.record_study_activity(USER)


def test_metrics_count_only_the_users_rows(db):
    add_sessions(db, 2)
    add_sessions(db, 3, user_id="someone-else")
    db.add("topics", {"user_id": USER, "status": "learned"})
    db.add("topics", {"user_id": USER, "status": "in-progress"})
    db.add("subjects", {"user_id": USER, "name": "Maths"})

    metrics = ProgressRepository(db).load_metrics(USER, current_streak=4)

    assert (metrics.session_count, metrics.topics_learned_count, metrics.subject_count, metrics.current_streak) == (2, 1, 1, 4)


def test_badges_merge_catalog_with_stored_progress(db, service):
    ProgressRepository(db).save_badge_progress(USER, UserBadgeProgress(badge_id="topics-10", progress=30))

    badges = {badge.id: badge for badge in service.get_badges(USER)}

    assert badges["topics-10"].progress == 30
    assert badges["first-session"].progress == 0
    assert badges["first-session"].earned_at is None


def test_date_only_streak_row_continues_next_day(db, service, clock):
    db.add("streaks", {"user_id": USER, "current_streak": 5, "longest_streak": 5, "last_study_date": "2024-01-01", "last_activity_at": None})
    clock.advance(hours=23)

    result = service.record_study_activity(USER)

    assert result["streak"].current_streak == 6
    assert (result["outcome"].increased, result["outcome"].broken) == (True, False)
    row = db.rows("streaks")[0]
    assert row["last_activity_at"] == "2024-01-02T09:00:00+00:00"
    assert row["last_study_date"] == "2024-01-02"


def test_date_only_streak_row_same_day_is_a_no_op(db, service):
    db.add("streaks", {"user_id": USER, "current_streak": 5, "longest_streak": 8, "last_study_date": "2024-01-01"})

    result = service.record_study_activity(USER)

    assert not result["outcome"].increased
    assert result["streak"].current_streak == 5


def test_date_only_streak_row_breaks_after_a_missed_day(db, service):
    db.add("streaks", {"user_id": USER, "current_streak": 5, "longest_streak": 5, "last_study_date": "2023-12-30"})

    result = service.record_study_activity(USER)

    assert result["outcome"].broken
    assert result["streak"].current_streak == 1
    assert result["streak"].longest_streak == 5


def test_unreadable_study_date_fails_fast(db, service):
    db.add("streaks", {"user_id": USER, "current_streak": 1, "longest_streak": 1, "last_study_date": "yesterday"})

    with pytest.raises(ValidationError) as exc:
        service.get_streak(USER)
    assert exc.value.field == "last_study_date"
