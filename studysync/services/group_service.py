import logging
import secrets
from typing import Dict, List, Optional

from fastapi import Depends
from supabase import Client

from studysync.core.database import get_admin_database, get_database
from studysync.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from studysync.models.group import (
    GroupCreate, GroupRole, JoinGroupRequest, JoinGroupResponse, MessageCreate, ReactionSummary
)

logger = logging.getLogger(__name__)

MESSAGE_HISTORY_LIMIT = 100


def generate_invite_code() -> str:
    return secrets.token_hex(4)


class GroupMembershipService:
    """Study groups: membership, admin-only deletion and chat history.

    Invite code lookups go through the service-role client since a
    non-member cannot see the group under row-level security.
    """

    def __init__(self, db: Client, admin_db: Client):
        self.db = db
        self.admin_db = admin_db

    def list_groups(self, user_id: str) -> List[Dict]:
        memberships = self.db.table("group_memberships").select("group_id, role").eq("user_id", user_id).execute().data or []
        if not memberships:
            return []

        roles = {m["group_id"]: m["role"] for m in memberships}
        groups = self.db.table("groups").select("*").in_("id", list(roles)).order("created_at", desc=True).execute().data or []
        return [{**group, "role": roles.get(group["id"])} for group in groups]

    def create_group(self, user_id: str, group: GroupCreate) -> Dict:
        result = self.db.table("groups").insert({
            "name": group.name,
            "description": group.description,
            "created_by": user_id,
            "invite_code": generate_invite_code(),
        }).execute()
        created = result.data[0]

        # A membership trigger on the groups table may already have added this row
        self.db.table("group_memberships").upsert({
            "group_id": created["id"],
            "user_id": user_id,
            "role": GroupRole.ADMIN.value,
        }, on_conflict="group_id,user_id").execute()

        logger.info("User %s created group %s", user_id, created["id"])
        return {**created, "role": GroupRole.ADMIN.value}

    def join_group(self, user_id: str, request: JoinGroupRequest) -> JoinGroupResponse:
        groups = self.admin_db.table("groups").select("id, name").eq("invite_code", request.invite_code).execute()
        if not groups.data:
            logger.info("Group lookup failed for invite code %s", request.invite_code)
            raise NotFoundError("Invalid invite code")

        group = groups.data[0]
        if self._membership(group["id"], user_id, client=self.admin_db):
            raise ConflictError("You are already a member of this group", group_id=group["id"])

        self.admin_db.table("group_memberships").insert({
            "group_id": group["id"],
            "user_id": user_id,
            "role": GroupRole.MEMBER.value,
        }).execute()

        logger.info("User %s joined group %s", user_id, group["id"])
        return JoinGroupResponse(
            group_id=group["id"],
            group_name=group["name"],
            message=f"Successfully joined {group['name']}!",
        )

    def leave_group(self, user_id: str, group_id: str) -> None:
        if not self._membership(group_id, user_id):
            raise NotFoundError("You are not a member of this group")
        self.db.table("group_memberships").delete().eq("group_id", group_id).eq("user_id", user_id).execute()
        logger.info("User %s left group %s", user_id, group_id)

    def delete_group(self, user_id: str, group_id: str) -> None:
        membership = self._membership(group_id, user_id)
        if not membership:
            raise NotFoundError("Group not found")
        if membership["role"] != GroupRole.ADMIN.value:
            raise PermissionDeniedError("Only group admins can delete a group")

        messages = self.db.table("group_messages").select("id").eq("group_id", group_id).execute().data or []
        if messages:
            self.db.table("message_reactions").delete().in_("message_id", [m["id"] for m in messages]).execute()
        self.db.table("group_messages").delete().eq("group_id", group_id).execute()
        # Shared materials go back to being private to their owners
        self.db.table("study_materials").update({"group_id": None}).eq("group_id", group_id).execute()
        self.db.table("group_memberships").delete().eq("group_id", group_id).execute()
        self.db.table("groups").delete().eq("id", group_id).execute()
        logger.info("User %s deleted group %s", user_id, group_id)

    # Chat

    def list_messages(self, user_id: str, group_id: str) -> List[Dict]:
        self.require_member(group_id, user_id)
        result = self.db.table("group_messages").select("*").eq("group_id", group_id).order("created_at", desc=True).limit(MESSAGE_HISTORY_LIMIT).execute()
        # Most recent page, oldest first
        messages = list(reversed(result.data or []))

        reactions = self._reactions_by_message([message["id"] for message in messages])
        return [
            {**message, "reactions": summarize_reactions(reactions.get(message["id"], []), user_id)}
            for message in messages
        ]

    def post_message(self, user_id: str, group_id: str, message: MessageCreate) -> Dict:
        self.require_member(group_id, user_id)
        attachment = message.attachment

        result = self.db.table("group_messages").insert({
            "group_id": group_id,
            "user_id": user_id,
            "content": message.content or f"Shared: {attachment.name}",
            "attachment_url": attachment.url if attachment else None,
            "attachment_name": attachment.name if attachment else None,
            "attachment_type": attachment.type if attachment else None,
        }).execute()
        return {**result.data[0], "reactions": []}

    # Reactions

    def list_reactions(self, user_id: str, group_id: str, message_id: str) -> List[ReactionSummary]:
        self.require_member(group_id, user_id)
        self._get_message(group_id, message_id)
        return self._summary(message_id, user_id)

    def add_reaction(self, user_id: str, group_id: str, message_id: str, emoji: str) -> List[ReactionSummary]:
        """React to a message; reacting twice with the same emoji is a no-op"""
        self.require_member(group_id, user_id)
        self._get_message(group_id, message_id)

        existing = self.db.table("message_reactions").select("id").eq("message_id", message_id).eq("user_id", user_id).eq("emoji", emoji).execute()
        if not existing.data:
            self.db.table("message_reactions").insert({
                "message_id": message_id,
                "user_id": user_id,
                "emoji": emoji,
            }).execute()
        return self._summary(message_id, user_id)

    def remove_reaction(self, user_id: str, group_id: str, message_id: str, emoji: str) -> List[ReactionSummary]:
        self.require_member(group_id, user_id)
        self._get_message(group_id, message_id)
        self.db.table("message_reactions").delete().eq("message_id", message_id).eq("user_id", user_id).eq("emoji", emoji).execute()
        return self._summary(message_id, user_id)

    # Membership lookups

    def group_ids(self, user_id: str) -> List[str]:
        memberships = self.db.table("group_memberships").select("group_id").eq("user_id", user_id).execute().data or []
        return [m["group_id"] for m in memberships]

    def require_member(self, group_id: str, user_id: str) -> Dict:
        membership = self._membership(group_id, user_id)
        if not membership:
            raise PermissionDeniedError("You are not a member of this group")
        return membership

    def _membership(self, group_id: str, user_id: str, client: Optional[Client] = None) -> Optional[Dict]:
        client = client or self.db
        result = client.table("group_memberships").select("id, role").eq("group_id", group_id).eq("user_id", user_id).execute()
        return result.data[0] if result.data else None

    def _get_message(self, group_id: str, message_id: str) -> Dict:
        result = self.db.table("group_messages").select("id").eq("id", message_id).eq("group_id", group_id).execute()
        if not result.data:
            raise NotFoundError("Message not found")
        return result.data[0]

    def _reactions_by_message(self, message_ids: List[str]) -> Dict[str, List[Dict]]:
        if not message_ids:
            return {}
        rows = self.db.table("message_reactions").select("*").in_("message_id", message_ids).order("created_at").execute().data or []
        grouped: Dict[str, List[Dict]] = {}
        for row in rows:
            grouped.setdefault(row["message_id"], []).append(row)
        return grouped

    def _summary(self, message_id: str, user_id: str) -> List[ReactionSummary]:
        return summarize_reactions(self._reactions_by_message([message_id]).get(message_id, []), user_id)


def summarize_reactions(reactions: List[Dict], user_id: str) -> List[ReactionSummary]:
    """Per-emoji totals, in the order each emoji was first used"""
    totals: Dict[str, ReactionSummary] = {}
    for reaction in reactions:
        summary = totals.setdefault(reaction["emoji"], ReactionSummary(emoji=reaction["emoji"], count=0, has_reacted=False))
        summary.count += 1
        summary.has_reacted = summary.has_reacted or reaction["user_id"] == user_id
    return list(totals.values())


async def get_group_service(
    db: Client = Depends(get_database),
    admin_db: Client = Depends(get_admin_database)
) -> GroupMembershipService:
    return GroupMembershipService(db, admin_db)
