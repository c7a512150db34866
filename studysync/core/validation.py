from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from studysync.core.errors import ValidationError

Model = TypeVar("Model", bound=BaseModel)


def parse_model(model: Type[Model], raw: Any) -> Model:
    """Validate data crossing the persistence boundary into ``model``."""
    if not isinstance(raw, dict):
        raise ValidationError(f"{model.__name__} must be a JSON object")
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(f"Invalid {model.__name__}: {first['msg']}", field=field) from e
