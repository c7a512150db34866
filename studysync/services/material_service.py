import logging
from typing import Dict, List, Optional

from fastapi import Depends
from supabase import Client

from studysync.core.database import get_database
from studysync.core.errors import NotFoundError, PermissionDeniedError
from studysync.models.material import MaterialCreate
from studysync.services.group_service import GroupMembershipService, get_group_service

logger = logging.getLogger(__name__)


class MaterialService:
    """Saved links and PDFs, optionally shared with one of the owner's groups.

    A material is visible to its owner and to members of the group it is
    shared with. Only the owner may delete or re-share it.
    """

    def __init__(self, db: Client, groups: GroupMembershipService):
        self.db = db
        self.groups = groups

    def list_materials(self, user_id: str, subject_id: Optional[str] = None, group_id: Optional[str] = None) -> List[Dict]:
        if group_id:
            self.groups.require_member(group_id, user_id)
            materials = self.db.table("study_materials").select("*").eq("group_id", group_id).execute().data or []
        else:
            materials = self.db.table("study_materials").select("*").eq("user_id", user_id).execute().data or []
            group_ids = self.groups.group_ids(user_id)
            if group_ids:
                shared = self.db.table("study_materials").select("*").in_("group_id", group_ids).execute().data or []
                known = {material["id"] for material in materials}
                materials += [material for material in shared if material["id"] not in known]

        if subject_id:
            materials = [material for material in materials if material.get("subject_id") == subject_id]
        return sorted(materials, key=lambda material: material.get("created_at") or "", reverse=True)

    def add_material(self, user_id: str, material: MaterialCreate) -> Dict:
        subject_id = str(material.subject_id) if material.subject_id else None
        group_id = str(material.group_id) if material.group_id else None

        if subject_id:
            subjects = self.db.table("subjects").select("id").eq("id", subject_id).eq("user_id", user_id).execute()
            if not subjects.data:
                raise NotFoundError("Subject not found")
        if group_id:
            self.groups.require_member(group_id, user_id)

        result = self.db.table("study_materials").insert({
            "user_id": user_id,
            "title": material.title,
            "description": material.description,
            "type": material.type.value,
            "url": material.url,
            "subject_id": subject_id,
            "group_id": group_id,
            "useful_count": 0,
        }).execute()
        logger.info("User %s added material %s", user_id, material.title)
        return result.data[0]

    def delete_material(self, user_id: str, material_id: str) -> None:
        material = self._get_visible(user_id, material_id)
        if material["user_id"] != user_id:
            raise PermissionDeniedError("Only the owner can delete this material")
        self.db.table("study_materials").delete().eq("id", material_id).eq("user_id", user_id).execute()

    def mark_useful(self, user_id: str, material_id: str) -> Dict:
        material = self._get_visible(user_id, material_id)
        result = self.db.table("study_materials").update({
            "useful_count": (material.get("useful_count") or 0) + 1,
        }).eq("id", material_id).execute()
        return result.data[0]

    def share_to_group(self, user_id: str, material_id: str, group_id: str) -> Dict:
        material = self._get_visible(user_id, material_id)
        if material["user_id"] != user_id:
            raise PermissionDeniedError("Only the owner can share this material")
        self.groups.require_member(group_id, user_id)

        result = self.db.table("study_materials").update({"group_id": group_id}).eq("id", material_id).eq("user_id", user_id).execute()
        logger.info("User %s shared material %s to group %s", user_id, material_id, group_id)
        return result.data[0]

    def _get_visible(self, user_id: str, material_id: str) -> Dict:
        result = self.db.table("study_materials").select("*").eq("id", material_id).execute()
        if result.data:
            material = result.data[0]
            if material["user_id"] == user_id:
                return material
            if material.get("group_id") and material["group_id"] in self.groups.group_ids(user_id):
                return material
        raise NotFoundError("Material not found")


async def get_material_service(
    db: Client = Depends(get_database),
    groups: GroupMembershipService = Depends(get_group_service)
) -> MaterialService:
    return MaterialService(db, groups)
