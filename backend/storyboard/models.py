"""
Pydantic models for storyboard sections and scenes.

A storyboard ("collection") is an ordered list of sections, each holding an
ordered list of scenes. Scenes and sections coming from the editor or from an
AI reply carry arbitrary extra attributes; those are kept in the model's
extra map and written back unchanged.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storyboard.errors import ErrorCode, StoryboardError

MEDIA_FIELDS = ("clipId", "voiceId", "musicId", "subtitles")


def is_present(value: Any) -> bool:
    """Return True when a field holds a usable value (not None, not an empty string)."""
    return value is not None and value != ""


class Scene(BaseModel):
    """Single scene within a storyboard section."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = Field(None, description="Stable scene UUID")
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = Field(None, description="Narration or script text")

    # Media references attached in the editor
    clipId: Optional[str] = None
    voiceId: Optional[str] = None
    musicId: Optional[str] = None
    subtitles: Optional[Any] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Keep malformed ids loadable; they fail identifier validation later."""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @property
    def extras(self) -> Dict[str, Any]:
        """Passthrough attributes that are not part of the scene schema."""
        return dict(self.model_extra or {})

    @property
    def display_title(self) -> str:
        return self.title or "Untitled"

    def get_field(self, name: str) -> Any:
        """Read a schema field or a passthrough attribute by name."""
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(name)


class Section(BaseModel):
    """Named, ordered group of scenes."""

    model_config = ConfigDict(extra="allow")

    label: Optional[str] = None
    description: Optional[str] = None
    scenes: List[Scene] = Field(default_factory=list)

    @property
    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


def load_sections(data: Any) -> List[Section]:
    """
    Build section models from models or raw payloads.

    Accepts a list of sections (models or dicts) or a dict holding a
    ``sections`` list, as stored on a video record.

    Raises:
        StoryboardError: If the payload is not a section list or fails validation
    """
    if data is None:
        return []

    if isinstance(data, dict):
        if "sections" not in data:
            raise StoryboardError(
                ErrorCode.INVALID_INPUT,
                "Storyboard payload has no 'sections' key",
                {"keys": sorted(data.keys())},
            )
        data = data["sections"] or []

    if not isinstance(data, (list, tuple)):
        raise StoryboardError(
            ErrorCode.INVALID_INPUT,
            f"Sections must be a list, got {type(data).__name__}",
        )

    sections = []
    for index, item in enumerate(data):
        if isinstance(item, Section):
            sections.append(item)
            continue
        try:
            sections.append(Section.model_validate(item))
        except ValidationError as e:
            raise StoryboardError(
                ErrorCode.INVALID_INPUT,
                f"Section {index} is malformed: {e.error_count()} validation error(s)",
                {"section_index": index, "errors": e.errors(include_url=False)},
            )
    return sections


def dump_sections(sections: List[Section]) -> List[Dict[str, Any]]:
    """Serialize sections, emitting only the fields present on each record."""
    return [section.model_dump(exclude_unset=True) for section in sections]
