from typing import Literal

from pydantic import BaseModel, Field, ValidationError

class SettingsSchema(BaseModel):
    set_count: int = Field(3, ge=1, le=10)
    top_n: int = Field(10, ge=1)
    suggestion_limit: int = Field(8, ge=1)
    language: str = "en"
    week_start: Literal["monday", "sunday"] = "monday"

def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
