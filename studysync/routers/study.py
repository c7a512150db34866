from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from studysync.models.study import (
    DailyActivity, SessionCreate, SessionResponse, SubjectCreate, SubjectResponse,
    SubjectUpdate, TopicCreate, TopicResponse, TopicUpdate, WeeklyStats
)
from studysync.core.security import verify_token
from studysync.services.study_service import StudyService, get_study_service

router = APIRouter()


@router.get("/subjects", response_model=List[SubjectResponse])
def list_subjects(
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.list_subjects(user_id)


@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
def create_subject(
    subject: SubjectCreate,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.create_subject(user_id, subject)


@router.patch("/subjects/{subject_id}", response_model=SubjectResponse)
def update_subject(
    subject_id: str,
    update: SubjectUpdate,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.update_subject(user_id, subject_id, update)


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subject(
    subject_id: str,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    """Delete a subject together with its topics"""
    service.delete_subject(user_id, subject_id)


@router.get("/topics", response_model=List[TopicResponse])
def list_topics(
    subject_id: Optional[str] = Query(None),
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.list_topics(user_id, subject_id)


@router.post("/topics", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(
    topic: TopicCreate,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.create_topic(user_id, topic)


@router.patch("/topics/{topic_id}", response_model=TopicResponse)
def update_topic(
    topic_id: str,
    update: TopicUpdate,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    """Update a topic; marking it learned re-evaluates badges"""
    return service.update_topic(user_id, topic_id, update)


@router.delete("/topics/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topic(
    topic_id: str,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    service.delete_topic(user_id, topic_id)


@router.get("/sessions", response_model=List[SessionResponse])
def list_sessions(
    limit: int = Query(50, le=200),
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.list_sessions(user_id, limit)


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
def log_session(
    session: SessionCreate,
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    """Log a study session, update the streak and check badges"""
    result = service.log_session(user_id, session)
    return {"message": "Session logged! Keep up the great work! 🎉", **result}


@router.get("/stats/weekly", response_model=WeeklyStats)
def get_weekly_stats(
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.get_weekly_stats(user_id)


@router.get("/stats/daily", response_model=List[DailyActivity])
def get_daily_activity(
    days: int = Query(30, ge=1, le=365),
    user_id: str = Depends(verify_token),
    service: StudyService = Depends(get_study_service)
):
    return service.get_daily_activity(user_id, days)
