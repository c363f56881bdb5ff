"""
Structure updates proposed by the storyboard assistant.

The assistant answers in free text. When it wants to restructure the video
it embeds a JSON object of the form::

    {"type": "structure_update", "sections": [...], "explanation": "..."}

Anything else is an ordinary chat reply.
"""

import json
import re
from typing import Any, Callable, List, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from storyboard.errors import ErrorCode, StoryboardError
from storyboard.ids import validate_scene_ids
from storyboard.models import Section
from storyboard.reconciler import MergeReport, reconcile_scenes

logger = structlog.get_logger()

STRUCTURE_UPDATE_TYPE = "structure_update"
DEFAULT_EXPLANATION = "I've updated your video structure as requested."

# Greedy: from the first "{" to the last "}" in the reply
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class StructureUpdate(BaseModel):
    """Restructured storyboard proposed by the assistant."""
    type: str = STRUCTURE_UPDATE_TYPE
    sections: List[Section]
    explanation: Optional[str] = Field(None, description="Message to show the user")

    @property
    def message(self) -> str:
        return self.explanation or DEFAULT_EXPLANATION


def extract_structure_update(reply: Optional[str]) -> Optional[StructureUpdate]:
    """
    Pull a structure update out of an assistant reply.

    Args:
        reply: Raw reply text

    Returns:
        StructureUpdate, or None when the reply is a regular chat message

    Raises:
        StoryboardError: If the reply declares a structure update whose
            sections cannot be parsed
    """
    if not reply:
        return None

    match = _JSON_OBJECT.search(reply)
    if not match:
        logger.info("regular_chat_response", reason="no_json_object")
        return None

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.info("regular_chat_response", reason="invalid_json", error=str(e))
        return None

    if not isinstance(payload, dict) or payload.get("type") != STRUCTURE_UPDATE_TYPE:
        logger.info("regular_chat_response", reason="not_a_structure_update")
        return None

    if not payload.get("sections"):
        logger.info("regular_chat_response", reason="no_sections")
        return None

    try:
        update = StructureUpdate.model_validate(payload)
    except ValidationError as e:
        raise StoryboardError(
            ErrorCode.INVALID_STRUCTURE_UPDATE,
            f"Structure update is malformed: {e.error_count()} validation error(s)",
            {"errors": e.errors(include_url=False)},
        )

    logger.info("structure_update_proposed", sections=len(update.sections))
    return update


def apply_structure_update(
    existing_sections: Any,
    update: StructureUpdate,
    *,
    id_factory: Optional[Callable[[], str]] = None,
) -> MergeReport:
    """
    Merge a proposed structure into the current storyboard and audit the ids.

    Raises:
        StoryboardError: INVALID_SCENE_IDS if the merged storyboard fails the audit
    """
    logger.info("structure_update_merging", sections=len(update.sections))
    report = reconcile_scenes(existing_sections, update.sections, id_factory=id_factory)

    if not validate_scene_ids(report.sections):
        raise StoryboardError(
            ErrorCode.INVALID_SCENE_IDS,
            "AI response resulted in invalid scene IDs",
        )

    logger.info(
        "structure_update_applied",
        sections=len(report.sections),
        orphans=report.orphan_count,
    )
    return report


def merge_assistant_reply(
    existing_sections: Any,
    reply: Optional[str],
    *,
    id_factory: Optional[Callable[[], str]] = None,
) -> Optional[MergeReport]:
    """
    Apply the structure update contained in a reply, if any.

    Returns:
        MergeReport, or None when the reply is a regular chat message
    """
    update = extract_structure_update(reply)
    if update is None:
        return None
    return apply_structure_update(existing_sections, update, id_factory=id_factory)
