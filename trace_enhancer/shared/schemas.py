"""
Pydantic schema for stack trace frames.
Frames travel as camelCase JSON between the SDKs, this library and the UI.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Frame(BaseModel):
    """One entry of a stack trace, optionally carrying source context."""
    model_config = ConfigDict(populate_by_name=True)

    file_name: Optional[str] = Field(default=None, alias="fileName")
    line_number: Optional[int] = Field(default=None, alias="lineNumber")
    function_name: Optional[str] = Field(default=None, alias="functionName")
    error: Optional[str] = Field(default=None, alias="error")
    source_mapping_metadata: Optional[Any] = Field(
        default=None,
        alias="sourceMappingMetadata",
        description="Opaque source map lookup details, passed through untouched",
    )
    line_content: Optional[str] = Field(default=None, alias="lineContent")
    lines_before: Optional[str] = Field(default=None, alias="linesBefore")
    lines_after: Optional[str] = Field(default=None, alias="linesAfter")

    @property
    def is_locatable(self) -> bool:
        """True if the frame names a file and a line."""
        return bool(self.file_name) and self.line_number is not None

    @property
    def is_enhanced(self) -> bool:
        return self.line_content is not None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


_FRAME_LIST = TypeAdapter(list[Frame])


def frames_from_json(raw: str) -> list[Frame]:
    """Validate a JSON array of frame objects. Raises pydantic.ValidationError."""
    return _FRAME_LIST.validate_json(raw)


def serialize_frames(frames: list[Frame]) -> str:
    """Serialize frames to camelCase JSON, omitting unset fields."""
    return _FRAME_LIST.dump_json(frames, by_alias=True, exclude_none=True).decode("utf-8")
