import math
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from studysync.core.errors import ValidationError
from studysync.models.badge import (
    BadgeCategory, BadgeEvaluationResult, BadgeMetric, BadgeRule,
    BadgeUnlocked, StudyMetrics, UserBadgeProgress
)

# Single authoritative catalog, shared by progress tracking and display
BADGE_CATALOG: List[BadgeRule] = [
    BadgeRule(id="first-session", name="First Steps",
              description="Complete your first study session",
              category=BadgeCategory.LEARNING,
              threshold_metric=BadgeMetric.SESSION_COUNT, threshold_value=1),
    BadgeRule(id="sessions-50", name="Knowledge Seeker",
              description="Complete 50 study sessions",
              category=BadgeCategory.LEARNING,
              threshold_metric=BadgeMetric.SESSION_COUNT, threshold_value=50),
    BadgeRule(id="topics-10", name="Topic Explorer",
              description="Mark 10 topics as learned",
              category=BadgeCategory.LEARNING,
              threshold_metric=BadgeMetric.TOPICS_LEARNED_COUNT, threshold_value=10),
    BadgeRule(id="topics-50", name="Topic Master",
              description="Mark 50 topics as learned",
              category=BadgeCategory.LEARNING,
              threshold_metric=BadgeMetric.TOPICS_LEARNED_COUNT, threshold_value=50),
    BadgeRule(id="subjects-5", name="Well Rounded",
              description="Track 5 different subjects",
              category=BadgeCategory.LEARNING,
              threshold_metric=BadgeMetric.SUBJECT_COUNT, threshold_value=5),
    BadgeRule(id="streak-3", name="On a Roll",
              description="Maintain a 3-day study streak",
              category=BadgeCategory.STREAK,
              threshold_metric=BadgeMetric.CURRENT_STREAK, threshold_value=3),
    BadgeRule(id="streak-7", name="Week Warrior",
              description="Maintain a 7-day study streak",
              category=BadgeCategory.STREAK,
              threshold_metric=BadgeMetric.CURRENT_STREAK, threshold_value=7),
    BadgeRule(id="streak-30", name="Marathon Runner",
              description="Study for 30 days in a row",
              category=BadgeCategory.STREAK,
              threshold_metric=BadgeMetric.CURRENT_STREAK, threshold_value=30),
]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_progress(metric_value: float, threshold_value: float) -> int:
    """Percentage towards a threshold, capped at 100"""
    return round_half_up(min(metric_value / threshold_value, 1.0) * 100)


def _validate_metrics(metrics: StudyMetrics) -> None:
    for metric in BadgeMetric:
        if metrics.value_for(metric) < 0:
            raise ValidationError(f"{metric.value} must not be negative", field=metric.value)


def _index_existing(
    existing: Iterable[UserBadgeProgress],
    rules: Sequence[BadgeRule]
) -> Dict[str, UserBadgeProgress]:
    known = {rule.id for rule in rules}
    indexed = {}
    for entry in existing:
        if entry.badge_id not in known:
            raise ValidationError(f"Unknown badge id: {entry.badge_id}", field="badge_id")
        indexed[entry.badge_id] = entry
    return indexed


def evaluate(
    metrics: StudyMetrics,
    rules: Sequence[BadgeRule],
    existing: Iterable[UserBadgeProgress],
    now: datetime
) -> BadgeEvaluationResult:
    """Recompute every rule's progress against the current metrics.

    Earned badges are never revoked: once ``earned_at`` is set the entry is
    returned untouched, whatever the metrics say now.
    """
    _validate_metrics(metrics)
    current = _index_existing(existing, rules)

    progress: List[UserBadgeProgress] = []
    unlocked: List[BadgeUnlocked] = []

    for rule in rules:
        raw = compute_progress(metrics.value_for(rule.threshold_metric), rule.threshold_value)
        entry = current.get(rule.id)

        if entry is None:
            progress.append(UserBadgeProgress(
                badge_id=rule.id,
                progress=raw,
                earned_at=now if raw >= 100 else None
            ))
            if raw >= 100:
                unlocked.append(BadgeUnlocked(badge_id=rule.id, badge_name=rule.name))
        elif entry.earned:
            progress.append(entry if entry.progress == 100 else entry.model_copy(update={"progress": 100}))
        elif raw >= 100:
            progress.append(UserBadgeProgress(badge_id=rule.id, progress=100, earned_at=now))
            unlocked.append(BadgeUnlocked(badge_id=rule.id, badge_name=rule.name))
        else:
            progress.append(UserBadgeProgress(badge_id=rule.id, progress=raw))

    return BadgeEvaluationResult(progress=progress, unlocked=unlocked)


