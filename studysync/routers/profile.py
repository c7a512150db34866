from fastapi import APIRouter, Depends
from supabase import Client

from studysync.models.preferences import AvatarConfig, ThemePreference, parse_preference
from studysync.core.database import get_database
from studysync.core.errors import NotFoundError
from studysync.core.security import verify_token

router = APIRouter()


def _load_profile_field(db: Client, user_id: str, column: str):
    result = db.table("profiles").select(column).eq("id", user_id).execute()
    if not result.data:
        raise NotFoundError("Profile not found")
    return result.data[0].get(column)


def _save_profile_field(db: Client, user_id: str, column: str, value: dict) -> None:
    result = db.table("profiles").update({column: value}).eq("id", user_id).execute()
    if not result.data:
        raise NotFoundError("Profile not found")


@router.get("/theme", response_model=ThemePreference)
def get_theme(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    """Get the stored theme, or the default when none was saved"""
    return parse_preference(ThemePreference, _load_profile_field(db, user_id, "theme_preference"))


@router.put("/theme", response_model=ThemePreference)
def update_theme(
    theme: dict,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    preference = parse_preference(ThemePreference, theme)
    _save_profile_field(db, user_id, "theme_preference", preference.model_dump())
    return preference


@router.get("/avatar")
def get_avatar(user_id: str = Depends(verify_token), db: Client = Depends(get_database)):
    avatar = parse_preference(AvatarConfig, _load_profile_field(db, user_id, "avatar_config"))
    return avatar.model_dump(by_alias=True)


@router.put("/avatar")
def update_avatar(
    avatar: dict,
    user_id: str = Depends(verify_token),
    db: Client = Depends(get_database)
):
    config = parse_preference(AvatarConfig, avatar)
    _save_profile_field(db, user_id, "avatar_config", config.model_dump(by_alias=True))
    return config.model_dump(by_alias=True)
