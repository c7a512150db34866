from fastapi import APIRouter, Depends
from typing import List

from studysync.models.badge import BadgeEvaluationResult, BadgeStatus
from studysync.models.streak import StreakRecord, StreakResponse
from studysync.core.security import verify_token
from studysync.services.gamification_service import GamificationService, get_gamification_service

router = APIRouter()

@router.get("/streak", response_model=StreakRecord)
def get_streak(
    user_id: str = Depends(verify_token),
    service: GamificationService = Depends(get_gamification_service)
):
    """Get the user's current streak"""
    return service.get_streak(user_id)

@router.post("/streak/activity")
def record_activity(
    user_id: str = Depends(verify_token),
    service: GamificationService = Depends(get_gamification_service)
):
    """Record a qualifying study activity and re-evaluate badges"""
    activity = service.record_study_activity(user_id)
    outcome = activity["outcome"]

    if outcome.broken:
        message = "Streak restarted. Day 1, let's go again! 💪"
    elif outcome.increased:
        message = f"🔥 {activity['streak'].current_streak}-day streak!"
    else:
        message = "Already counted today. Keep it up! 📚"

    return {"message": message, **activity}

@router.post("/streak/reset", response_model=StreakResponse)
def reset_streak(
    user_id: str = Depends(verify_token),
    service: GamificationService = Depends(get_gamification_service)
):
    """Reset the current streak, keeping the longest streak"""
    return StreakResponse(streak=service.reset_streak(user_id))

@router.get("/badges", response_model=List[BadgeStatus])
def get_badges(
    user_id: str = Depends(verify_token),
    service: GamificationService = Depends(get_gamification_service)
):
    """Get the badge catalog with the user's progress"""
    return service.get_badges(user_id)

@router.post("/badges/evaluate", response_model=BadgeEvaluationResult)
def evaluate_badges(
    user_id: str = Depends(verify_token),
    service: GamificationService = Depends(get_gamification_service)
):
    """Re-evaluate badge progress without recording activity"""
    return service.evaluate_badges(user_id)

@router.get("/profile")
def get_game_profile(
    user_id: str = Depends(verify_token),
    service: GamificationService = Depends(get_gamification_service)
):
    """Get streak, counters and badge summary for the user"""
    streak = service.get_streak(user_id)
    metrics = service.repository.load_metrics(user_id, streak.current_streak)
    badges = service.get_badges(user_id)
    earned = [badge for badge in badges if badge.earned_at is not None]

    return {
        "streak": streak,
        "stats": {
            "total_sessions": metrics.session_count,
            "topics_learned": metrics.topics_learned_count,
            "subjects": metrics.subject_count,
            "badges_earned": len(earned),
            "badges_total": len(badges),
        },
        "badges": badges,
    }
