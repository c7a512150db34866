import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from fastapi import Depends
from supabase import Client

from studysync.core.database import get_database
from studysync.core.errors import NotFoundError
from studysync.models.study import (
    DailyActivity, SessionCreate, SubjectCreate, SubjectUpdate,
    TopicCreate, TopicStatus, TopicUpdate, WeeklyStats
)
from studysync.services.gamification_service import GamificationService, get_gamification_service

logger = logging.getLogger(__name__)


class StudyService:
    """Subjects, topics and sessions owned by a single user"""

    def __init__(self, db: Client, gamification: GamificationService):
        self.db = db
        self.gamification = gamification

    # Subjects

    def list_subjects(self, user_id: str) -> List[Dict]:
        result = self.db.table("subjects").select("*").eq("user_id", user_id).order("created_at", desc=True).execute()
        return result.data or []

    def create_subject(self, user_id: str, subject: SubjectCreate) -> Dict:
        result = self.db.table("subjects").insert({
            "user_id": user_id,
            "name": subject.name,
            "description": subject.description,
            "color": subject.color,
        }).execute()
        logger.info("User %s created subject %s", user_id, subject.name)
        return result.data[0]

    def update_subject(self, user_id: str, subject_id: str, update: SubjectUpdate) -> Dict:
        self._get_owned("subjects", user_id, subject_id)
        update_data = update.model_dump(exclude_unset=True)
        if not update_data:
            return self._get_owned("subjects", user_id, subject_id)
        result = self.db.table("subjects").update(update_data).eq("id", subject_id).eq("user_id", user_id).execute()
        return result.data[0]

    def delete_subject(self, user_id: str, subject_id: str) -> None:
        self._get_owned("subjects", user_id, subject_id)
        self.db.table("topics").delete().eq("subject_id", subject_id).eq("user_id", user_id).execute()
        self.db.table("subjects").delete().eq("id", subject_id).eq("user_id", user_id).execute()

    # Topics

    def list_topics(self, user_id: str, subject_id: Optional[str] = None) -> List[Dict]:
        query = self.db.table("topics").select("*").eq("user_id", user_id)
        if subject_id:
            query = query.eq("subject_id", subject_id)
        result = query.order("order_index").execute()
        return result.data or []

    def create_topic(self, user_id: str, topic: TopicCreate) -> Dict:
        subject_id = str(topic.subject_id)
        self._get_owned("subjects", user_id, subject_id)

        # New topics go to the end of the subject
        order_index = len(self.list_topics(user_id, subject_id))

        result = self.db.table("topics").insert({
            "user_id": user_id,
            "subject_id": subject_id,
            "name": topic.name,
            "status": TopicStatus.NOT_STARTED.value,
            "order_index": order_index,
        }).execute()
        return result.data[0]

    def update_topic(self, user_id: str, topic_id: str, update: TopicUpdate) -> Dict:
        self._get_owned("topics", user_id, topic_id)
        update_data = update.model_dump(exclude_unset=True, mode="json")
        if not update_data:
            return self._get_owned("topics", user_id, topic_id)

        result = self.db.table("topics").update(update_data).eq("id", topic_id).eq("user_id", user_id).execute()

        if update.status == TopicStatus.LEARNED:
            self.gamification.evaluate_badges(user_id)

        return result.data[0]

    def delete_topic(self, user_id: str, topic_id: str) -> None:
        self._get_owned("topics", user_id, topic_id)
        self.db.table("topics").delete().eq("id", topic_id).eq("user_id", user_id).execute()

    # Sessions

    def list_sessions(self, user_id: str, limit: int = 50) -> List[Dict]:
        result = self.db.table("study_sessions").select("*").eq("user_id", user_id).order("created_at", desc=True).limit(limit).execute()
        return result.data or []

    def log_session(self, user_id: str, session: SessionCreate) -> Dict:
        """Store a session, then run the streak and badge pass for it"""
        self._get_owned("subjects", user_id, str(session.subject_id))

        result = self.db.table("study_sessions").insert({
            "user_id": user_id,
            "subject_id": str(session.subject_id),
            "topic_ids": [str(topic_id) for topic_id in session.topic_ids],
            "notes": session.notes,
            "duration": session.duration,
            "session_date": session.session_date.isoformat(),
            "created_at": self.gamification.clock.now().isoformat(),
        }).execute()

        activity = self.gamification.record_study_activity(user_id)

        return {"session": result.data[0], **activity}

    # Analytics

    def get_weekly_stats(self, user_id: str) -> WeeklyStats:
        now = self.gamification.clock.now()
        week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)

        sessions = self.db.table("study_sessions").select("*").eq("user_id", user_id).gte("created_at", two_weeks_ago.isoformat()).execute().data or []

        this_week = [s for s in sessions if _parse_timestamp(s["created_at"]) >= week_ago]
        last_week = [s for s in sessions if two_weeks_ago <= _parse_timestamp(s["created_at"]) < week_ago]

        # Most studied: the subject with the most sessions this week
        subject_counts: Dict[str, int] = {}
        for session in this_week:
            subject_counts[session["subject_id"]] = subject_counts.get(session["subject_id"], 0) + 1

        most_studied = None
        if subject_counts:
            top_subject = max(subject_counts, key=subject_counts.get)
            subjects = self.db.table("subjects").select("name").eq("id", top_subject).execute()
            most_studied = subjects.data[0]["name"] if subjects.data else None

        return WeeklyStats(
            total_sessions=len(this_week),
            total_duration=sum(s.get("duration") or 0 for s in this_week),
            topics_completed=self.gamification.repository.topics_learned_count(user_id),
            most_studied_subject=most_studied,
            consistency_score=min(100.0, round(len(this_week) / 7 * 100, 1)),
            previous_week_sessions=len(last_week),
        )

    def get_daily_activity(self, user_id: str, days: int = 30) -> List[DailyActivity]:
        today = self.gamification.clock.now().date()
        start = today - timedelta(days=days - 1)

        sessions = self.db.table("study_sessions").select("session_date, subject_id").eq("user_id", user_id).gte("session_date", start.isoformat()).execute().data or []

        activity = []
        for offset in range(days):
            day = (start + timedelta(days=offset)).isoformat()
            day_sessions = [s for s in sessions if s["session_date"] == day]
            activity.append(DailyActivity(
                date=day,
                sessions=len(day_sessions),
                subjects=sorted({s["subject_id"] for s in day_sessions}),
            ))
        return activity

    def _get_owned(self, table: str, user_id: str, row_id: str) -> Dict:
        result = self.db.table(table).select("*").eq("id", row_id).eq("user_id", user_id).execute()
        if not result.data:
            raise NotFoundError(f"{table[:-1].capitalize()} not found")
        return result.data[0]


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.astimezone()


async def get_study_service(
    db: Client = Depends(get_database),
    gamification: GamificationService = Depends(get_gamification_service)
) -> StudyService:
    return StudyService(db, gamification)
