from fastapi import APIRouter, Depends, Query, status
from typing import List

from studysync.models.group import (
    GroupCreate, GroupResponse, JoinGroupRequest, JoinGroupResponse,
    MessageCreate, MessageResponse, ReactionCreate, ReactionSummary
)
from studysync.core.security import verify_token
from studysync.services.group_service import GroupMembershipService, get_group_service

router = APIRouter()


@router.get("/", response_model=List[GroupResponse])
def list_groups(
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    """Groups the user belongs to, with their role"""
    return service.list_groups(user_id)


@router.post("/", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
def create_group(
    group: GroupCreate,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    return service.create_group(user_id, group)


@router.post("/join", response_model=JoinGroupResponse)
def join_group(
    request: JoinGroupRequest,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    """Join a group by invite code"""
    return service.join_group(user_id, request)


@router.delete("/{group_id}/membership", status_code=status.HTTP_204_NO_CONTENT)
def leave_group(
    group_id: str,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    service.leave_group(user_id, group_id)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: str,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    """Delete a group (admins only)"""
    service.delete_group(user_id, group_id)


@router.get("/{group_id}/messages", response_model=List[MessageResponse])
def list_messages(
    group_id: str,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    return service.list_messages(user_id, group_id)


@router.post("/{group_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def post_message(
    group_id: str,
    message: MessageCreate,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    """Post a message; the text may be empty when an attachment is shared"""
    return service.post_message(user_id, group_id, message)


@router.get("/{group_id}/messages/{message_id}/reactions", response_model=List[ReactionSummary])
def list_reactions(
    group_id: str,
    message_id: str,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    return service.list_reactions(user_id, group_id, message_id)


@router.post("/{group_id}/messages/{message_id}/reactions", response_model=List[ReactionSummary])
def add_reaction(
    group_id: str,
    message_id: str,
    reaction: ReactionCreate,
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    return service.add_reaction(user_id, group_id, message_id, reaction.emoji)


@router.delete("/{group_id}/messages/{message_id}/reactions", response_model=List[ReactionSummary])
def remove_reaction(
    group_id: str,
    message_id: str,
    emoji: str = Query(..., min_length=1, max_length=32),
    user_id: str = Depends(verify_token),
    service: GroupMembershipService = Depends(get_group_service)
):
    return service.remove_reaction(user_id, group_id, message_id, emoji)
