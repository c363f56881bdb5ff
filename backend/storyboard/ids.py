"""
Scene identifier helpers: validation, generation, repair and auditing.
"""

import re
import uuid
from typing import Any, Callable, List, Optional

import structlog

from storyboard.errors import ErrorCode, StoryboardError
from storyboard.models import Section, load_sections

logger = structlog.get_logger()

# Canonical UUID text form, versions 1-5, RFC 4122 variant
SCENE_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_scene_id(value: Any) -> bool:
    """
    Check whether a value is a canonical scene UUID string.

    Never raises; anything that is not a matching string returns False.
    """
    if not isinstance(value, str):
        return False
    return SCENE_ID_PATTERN.fullmatch(value) is not None


def new_scene_id() -> str:
    """Generate a fresh random scene id."""
    return str(uuid.uuid4())


def ensure_valid_scene_ids(
    sections: Any,
    *,
    id_factory: Optional[Callable[[], str]] = None,
) -> List[Section]:
    """
    Return a copy of the sections where every missing or invalid scene id
    has been replaced with a freshly generated one.

    Valid ids are left untouched, so running this on an already valid
    storyboard yields the same ids.

    Args:
        sections: Section models or raw section payloads
        id_factory: Callable producing new ids (defaults to new_scene_id)

    Returns:
        New list of sections
    """
    make_id = id_factory or new_scene_id
    repaired = 0
    result = []

    for section in load_sections(sections):
        scenes = []
        for scene in section.scenes:
            if is_valid_scene_id(scene.id):
                scenes.append(scene.model_copy())
            else:
                scenes.append(scene.model_copy(update={"id": make_id()}))
                repaired += 1
        result.append(section.model_copy(update={"scenes": scenes}))

    logger.info("scene_ids_normalized", sections=len(result), repaired=repaired)
    return result


def find_invalid_scene(sections: Any):
    """Return (section, scene) for the first scene with an invalid id, or None."""
    for section in load_sections(sections):
        for scene in section.scenes:
            if not is_valid_scene_id(scene.id):
                return section, scene
    return None


def validate_scene_ids(sections: Any) -> bool:
    """
    Check that every scene in every section has a valid id.

    Stops at the first invalid scene and logs it.
    """
    invalid = find_invalid_scene(sections)
    if invalid is None:
        return True

    section, scene = invalid
    logger.error(
        "invalid_scene_id",
        scene_id=scene.id,
        title=scene.title,
        section=section.label,
    )
    return False


def require_valid_scene_ids(sections: Any) -> None:
    """
    Raise if any scene has an invalid id. Run before persisting a storyboard.

    Raises:
        StoryboardError: INVALID_SCENE_IDS with the offending scene in details
    """
    invalid = find_invalid_scene(sections)
    if invalid is None:
        return

    section, scene = invalid
    raise StoryboardError(
        ErrorCode.INVALID_SCENE_IDS,
        "Invalid scene IDs detected",
        {"scene_id": scene.id, "title": scene.title, "section": section.label},
    )


def repair_loaded_sections(
    sections: Any,
    *,
    id_factory: Optional[Callable[[], str]] = None,
) -> List[Section]:
    """Normalize ids on a freshly loaded storyboard and audit the result."""
    repaired = ensure_valid_scene_ids(sections, id_factory=id_factory)

    if validate_scene_ids(repaired):
        logger.info("scene_ids_valid", sections=len(repaired))
    else:
        logger.error("scene_id_repair_failed", sections=len(repaired))

    return repaired
