"""Profile preference blobs stored as JSON on the profiles table.

Both shapes are parsed strictly: an unknown mode, accent or avatar part is a
``ValidationError``, never a silent fallback to the defaults.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal, Type, TypeVar

from studysync.core.validation import parse_model

HEX_COLOR = r"^#[A-Fa-f0-9]{6}$"


class ThemePreference(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Literal["light", "dark"] = "light"
    accent: Literal["blue", "purple", "green", "orange", "pink", "teal"] = "blue"


class AvatarConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    face_shape: Literal["round", "oval", "square"] = Field("round", alias="faceShape")
    skin_tone: str = Field("#FFDFC4", alias="skinTone", pattern=HEX_COLOR)
    hair_style: Literal["short", "long", "curly", "bald", "spiky"] = Field("short", alias="hairStyle")
    hair_color: str = Field("#2C1810", alias="hairColor", pattern=HEX_COLOR)
    eye_style: Literal["normal", "happy", "sleepy"] = Field("normal", alias="eyeStyle")
    accessory: Literal["none", "glasses", "headphones", "hat"] = "none"


Preference = TypeVar("Preference", ThemePreference, AvatarConfig)


def parse_preference(model: Type[Preference], raw: Any) -> Preference:
    """Parse a stored or submitted JSON blob, defaulting only when absent."""
    if raw is None:
        return model()
    return parse_model(model, raw)
