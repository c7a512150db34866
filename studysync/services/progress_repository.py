from datetime import date, datetime, time, tzinfo
from typing import List, Optional
from supabase import Client

from studysync.core.errors import ValidationError
from studysync.core.validation import parse_model
from studysync.models.badge import StudyMetrics, UserBadgeProgress
from studysync.models.streak import StreakRecord
from studysync.models.study import TopicStatus
from studysync.services.streak_engine import local_date


class ProgressRepository:
    """Streak, badge and metric persistence over the Supabase tables"""

    def __init__(self, db: Client):
        self.db = db

    # Streaks

    def load_streak_record(self, user_id: str, tz: Optional[tzinfo] = None) -> StreakRecord:
        result = self.db.table("streaks").select("*").eq("user_id", user_id).execute()
        if not result.data:
            return StreakRecord()

        row = result.data[0]
        last_activity = row.get("last_activity_at")
        if last_activity is None and row.get("last_study_date"):
            last_activity = _end_of_local_day(row["last_study_date"], tz)

        return parse_model(StreakRecord, {
            "current_streak": row.get("current_streak", 0),
            "longest_streak": row.get("longest_streak", 0),
            "last_activity_date": last_activity,
        })

    def save_streak_record(self, user_id: str, record: StreakRecord, tz: Optional[tzinfo] = None) -> None:
        last = record.last_activity_date
        self.db.table("streaks").upsert({
            "user_id": user_id,
            "current_streak": record.current_streak,
            "longest_streak": record.longest_streak,
            "last_activity_at": last.isoformat() if last else None,
            "last_study_date": local_date(last, tz).isoformat() if last else None,
        }, on_conflict="user_id").execute()

    # Badges

    def load_badge_progress(self, user_id: str) -> List[UserBadgeProgress]:
        result = self.db.table("user_badges").select("badge_id, progress, earned_at").eq("user_id", user_id).execute()
        return [parse_model(UserBadgeProgress, row) for row in result.data or []]

    def save_badge_progress(self, user_id: str, progress: UserBadgeProgress) -> None:
        self.db.table("user_badges").upsert({
            "user_id": user_id,
            "badge_id": progress.badge_id,
            "progress": progress.progress,
            "earned_at": progress.earned_at.isoformat() if progress.earned_at else None,
        }, on_conflict="user_id,badge_id").execute()

    # Metrics

    def _count(self, table: str, user_id: str, **filters) -> int:
        query = self.db.table(table).select("id", count="exact").eq("user_id", user_id)
        for column, value in filters.items():
            query = query.eq(column, value)
        result = query.execute()
        return result.count if result.count is not None else len(result.data or [])

    def session_count(self, user_id: str) -> int:
        return self._count("study_sessions", user_id)

    def topics_learned_count(self, user_id: str) -> int:
        return self._count("topics", user_id, status=TopicStatus.LEARNED.value)

    def subject_count(self, user_id: str) -> int:
        return self._count("subjects", user_id)

    def load_metrics(self, user_id: str, current_streak: int) -> StudyMetrics:
        return StudyMetrics(
            session_count=self.session_count(user_id),
            topics_learned_count=self.topics_learned_count(user_id),
            subject_count=self.subject_count(user_id),
            current_streak=current_streak,
        )


def _end_of_local_day(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """Latest instant of a date-only ``last_study_date``.

    Rows written before ``last_activity_at`` existed only know the day of
    the last activity, so studying on the following calendar day keeps the
    streak going.
    """
    try:
        day = datetime.combine(date.fromisoformat(str(value)[:10]), time.max)
    except ValueError as e:
        raise ValidationError(f"Invalid last_study_date: {value!r}", field="last_study_date") from e
    return day.replace(tzinfo=tz) if tz is not None else day.astimezone()
