from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from studysync.models.material import MaterialCreate, MaterialResponse, ShareMaterialRequest
from studysync.core.security import verify_token
from studysync.services.material_service import MaterialService, get_material_service

router = APIRouter()


@router.get("/", response_model=List[MaterialResponse])
def list_materials(
    subject_id: Optional[str] = Query(None),
    group_id: Optional[str] = Query(None),
    user_id: str = Depends(verify_token),
    service: MaterialService = Depends(get_material_service)
):
    """The user's own materials plus those shared with their groups"""
    return service.list_materials(user_id, subject_id, group_id)


@router.post("/", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
def add_material(
    material: MaterialCreate,
    user_id: str = Depends(verify_token),
    service: MaterialService = Depends(get_material_service)
):
    return service.add_material(user_id, material)


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(
    material_id: str,
    user_id: str = Depends(verify_token),
    service: MaterialService = Depends(get_material_service)
):
    service.delete_material(user_id, material_id)


@router.post("/{material_id}/useful", response_model=MaterialResponse)
def mark_useful(
    material_id: str,
    user_id: str = Depends(verify_token),
    service: MaterialService = Depends(get_material_service)
):
    return service.mark_useful(user_id, material_id)


@router.put("/{material_id}/group", response_model=MaterialResponse)
def share_to_group(
    material_id: str,
    request: ShareMaterialRequest,
    user_id: str = Depends(verify_token),
    service: MaterialService = Depends(get_material_service)
):
    """Share a material with one of the owner's groups"""
    return service.share_to_group(user_id, material_id, str(request.group_id))
