"""
Storyboard scene tools.

Keeps scene ids stable when an AI regenerates a video's storyboard:
- Scene and section models with passthrough attributes
- Scene id validation, generation, repair and auditing
- Scene similarity heuristics and the merge itself
- Parsing of assistant structure updates
"""

__version__ = "0.1.0"

from .errors import ErrorCode, StoryboardError
from .models import MEDIA_FIELDS, Scene, Section, dump_sections, load_sections
from .ids import (
    ensure_valid_scene_ids,
    is_valid_scene_id,
    new_scene_id,
    repair_loaded_sections,
    require_valid_scene_ids,
    validate_scene_ids,
)
from .similarity import MatchRule, are_scenes_similar, match_rule
from .reconciler import MergeReport, SceneMatch, merge_scene_changes, reconcile_scenes
from .structure_update import (
    StructureUpdate,
    apply_structure_update,
    extract_structure_update,
    merge_assistant_reply,
)

__all__ = [
    "ErrorCode",
    "StoryboardError",
    "MEDIA_FIELDS",
    "Scene",
    "Section",
    "dump_sections",
    "load_sections",
    "ensure_valid_scene_ids",
    "is_valid_scene_id",
    "new_scene_id",
    "repair_loaded_sections",
    "require_valid_scene_ids",
    "validate_scene_ids",
    "MatchRule",
    "are_scenes_similar",
    "match_rule",
    "MergeReport",
    "SceneMatch",
    "merge_scene_changes",
    "reconcile_scenes",
    "StructureUpdate",
    "apply_structure_update",
    "extract_structure_update",
    "merge_assistant_reply",
]
