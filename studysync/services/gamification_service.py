import logging
from datetime import tzinfo
from typing import Dict, List, Optional, Sequence

from fastapi import Depends
from supabase import Client

from studysync.core.clock import SystemClock, get_clock
from studysync.core.database import get_database
from studysync.models.badge import (
    BadgeEvaluationResult, BadgeRule, BadgeStatus, UserBadgeProgress
)
from studysync.models.streak import StreakRecord
from studysync.services import badge_evaluator, streak_engine
from studysync.services.badge_evaluator import BADGE_CATALOG
from studysync.services.notifications import BadgeNotifier, get_notifier
from studysync.services.progress_repository import ProgressRepository

logger = logging.getLogger(__name__)


class GamificationService:
    """Wires the streak engine and badge evaluator to their collaborators.

    One user action triggers one pass: load state, compute, persist, notify.
    Concurrent passes for the same user are last-writer-wins.
    """

    def __init__(
        self,
        repository: ProgressRepository,
        clock: SystemClock,
        notifier: BadgeNotifier,
        rules: Sequence[BadgeRule] = BADGE_CATALOG
    ):
        self.repository = repository
        self.clock = clock
        self.notifier = notifier
        self.rules = list(rules)

    @property
    def tz(self) -> Optional[tzinfo]:
        return getattr(self.clock, "tz", None)

    def get_streak(self, user_id: str) -> StreakRecord:
        return self.repository.load_streak_record(user_id, self.tz)

    def record_study_activity(self, user_id: str) -> Dict:
        """Streak transition followed by a badge pass"""
        current = self.repository.load_streak_record(user_id, self.tz)
        record, outcome = streak_engine.record_activity(current, self.clock.now(), self.tz)

        if outcome.increased:
            self.repository.save_streak_record(user_id, record, self.tz)
            if outcome.broken:
                logger.info("Streak broken for user %s (was %d)", user_id, current.current_streak)

        evaluation = self.evaluate_badges(user_id, current_streak=record.current_streak)

        return {
            "streak": record,
            "outcome": outcome,
            "badges": evaluation.progress,
            "unlocked": evaluation.unlocked,
        }

    def reset_streak(self, user_id: str) -> StreakRecord:
        record = streak_engine.reset_streak(self.repository.load_streak_record(user_id, self.tz))
        self.repository.save_streak_record(user_id, record, self.tz)
        return record

    def evaluate_badges(self, user_id: str, current_streak: Optional[int] = None) -> BadgeEvaluationResult:
        """Re-evaluate every badge rule and persist the changed entries.

        Each badge is written independently. A failed write does not stop
        the others; the first failure is re-raised once all were attempted.
        """
        if current_streak is None:
            current_streak = self.repository.load_streak_record(user_id, self.tz).current_streak

        existing = self.repository.load_badge_progress(user_id)
        metrics = self.repository.load_metrics(user_id, current_streak)
        evaluation = badge_evaluator.evaluate(metrics, self.rules, existing, self.clock.now())

        before = {entry.badge_id: entry for entry in existing}
        failed = set()
        first_error = None

        for entry in evaluation.progress:
            if before.get(entry.badge_id) == entry:
                continue
            try:
                self.repository.save_badge_progress(user_id, entry)
            except Exception as e:
                logger.error("Failed to save badge %s for user %s: %s", entry.badge_id, user_id, e)
                failed.add(entry.badge_id)
                if first_error is None:
                    first_error = e

        for event in evaluation.unlocked:
            if event.badge_id in failed:
                continue
            try:
                self.notifier.badge_unlocked(user_id, event)
            except Exception:
                logger.exception("Badge notification failed for user %s", user_id)

        if first_error is not None:
            raise first_error

        return evaluation

    def get_badges(self, user_id: str) -> List[BadgeStatus]:
        """Catalog merged with the user's stored progress"""
        stored: Dict[str, UserBadgeProgress] = {
            entry.badge_id: entry for entry in self.repository.load_badge_progress(user_id)
        }

        badges = []
        for rule in self.rules:
            entry = stored.get(rule.id)
            badges.append(BadgeStatus(
                id=rule.id,
                name=rule.name,
                description=rule.description,
                category=rule.category,
                requirement=rule.threshold_value,
                progress=entry.progress if entry else 0,
                earned_at=entry.earned_at if entry else None,
            ))
        return badges


# Dependency for getting the service, collaborators resolved per request
async def get_gamification_service(
    db: Client = Depends(get_database),
    clock: SystemClock = Depends(get_clock),
    notifier: BadgeNotifier = Depends(get_notifier)
) -> GamificationService:
    return GamificationService(ProgressRepository(db), clock, notifier)
