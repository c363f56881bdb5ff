"""
Merge an AI-regenerated storyboard into the existing one.

Scenes that are judged to be the same as an existing scene keep the existing
scene's id and inherit media references the new scene does not set. All other
scenes get fresh ids. Existing scenes that nothing claims are dropped from the
result and reported as orphans.

The merge never raises on data-quality problems: existing scenes with a
missing or malformed id are left out of matching and logged.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel, Field

from config import settings
from storyboard.debug import log_rule_checked, log_scene_pool
from storyboard.ids import is_valid_scene_id, new_scene_id
from storyboard.models import Scene, Section, is_present, load_sections
from storyboard.similarity import MatchRule, match_rule

logger = structlog.get_logger()


class SceneMatch(BaseModel):
    """A new scene that took over an existing scene's id."""
    scene_id: str
    title: Optional[str] = None
    rule: MatchRule
    section_index: int
    scene_index: int
    carried_fields: List[str] = Field(default_factory=list)


class MergeReport(BaseModel):
    """Result of a merge: the new sections plus what happened to each scene."""
    sections: List[Section]
    matches: List[SceneMatch] = Field(default_factory=list)
    created_ids: List[str] = Field(default_factory=list)
    orphans: List[Scene] = Field(default_factory=list, description="Existing scenes no new scene claimed")
    skipped: List[Scene] = Field(default_factory=list, description="Existing scenes excluded for invalid ids")

    @property
    def scene_count(self) -> int:
        return sum(len(section.scenes) for section in self.sections)

    @property
    def orphan_count(self) -> int:
        return len(self.orphans)

    def summary(self) -> Dict[str, Any]:
        """Compact, JSON-friendly description of the merge."""
        return {
            "sections": len(self.sections),
            "scenes": self.scene_count,
            "matched": [match.model_dump(mode="json") for match in self.matches],
            "created_ids": list(self.created_ids),
            "orphans": [{"id": scene.id, "title": scene.title} for scene in self.orphans],
            "skipped": [{"id": scene.id, "title": scene.title} for scene in self.skipped],
        }


def build_scene_pool(existing_sections: List[Section], log=None) -> Tuple[List[Scene], List[Scene]]:
    """
    Flatten existing scenes, in order, into the pool of claimable scenes.

    Returns:
        (pool, skipped) where skipped holds scenes whose id is invalid
    """
    log = log or logger
    pool = []
    skipped = []

    for section in existing_sections:
        for scene in section.scenes:
            if is_valid_scene_id(scene.id):
                pool.append(scene.model_copy())
            else:
                log.warning(
                    "invalid_existing_scene_id",
                    scene_id=scene.id,
                    title=scene.title,
                    section=section.label,
                )
                skipped.append(scene)

    return pool, skipped


def find_matching_scene(candidate: Scene, pool: List[Scene]) -> Tuple[Optional[int], Optional[MatchRule]]:
    """
    Find the first pool member that matches the candidate.

    First match in pool order wins, even if a later member would be closer.
    """
    for index, existing in enumerate(pool):
        rule = match_rule(candidate, existing)
        log_rule_checked(candidate.title, existing.id, rule)
        if rule is not None:
            return index, rule
    return None, None


def carry_forward_fields(candidate: Scene, matched: Scene, fields: List[str]) -> Dict[str, Any]:
    """Media values set on the matched scene that the candidate leaves empty."""
    updates = {}
    for name in fields:
        existing_value = matched.get_field(name)
        if is_present(existing_value) and not is_present(candidate.get_field(name)):
            updates[name] = existing_value
    return updates


def reconcile_scenes(
    existing_sections: Any,
    new_sections: Any,
    *,
    id_factory: Optional[Callable[[], str]] = None,
    log=None,
) -> MergeReport:
    """
    Merge newly generated sections into the existing storyboard.

    Section order, scene order and section metadata all come from the new
    sections. Neither input is modified.

    Args:
        existing_sections: Current storyboard sections (models or raw dicts)
        new_sections: Regenerated sections (models or raw dicts)
        id_factory: Callable producing new ids (defaults to new_scene_id)
        log: Bound structlog logger for diagnostic events

    Returns:
        MergeReport with the merged sections, matches, new ids and orphans
    """
    log = log or logger
    make_id = id_factory or new_scene_id
    fields = settings.carry_forward_fields

    existing = load_sections(existing_sections)
    incoming = load_sections(new_sections)

    log.info(
        "scene_merge_started",
        existing_sections=len(existing),
        new_sections=len(incoming),
    )

    pool, skipped = build_scene_pool(existing, log)
    log.info("scene_pool_built", available_scenes=len(pool), skipped_scenes=len(skipped))
    log_scene_pool(pool)

    merged_sections = []
    matches = []
    created_ids = []

    for section_index, section in enumerate(incoming):
        log.info(
            "scene_section_processing",
            section_index=section_index,
            label=section.label,
            scenes=len(section.scenes),
        )

        scenes = []
        for scene_index, candidate in enumerate(section.scenes):
            pool_index, rule = find_matching_scene(candidate, pool)

            if pool_index is not None:
                matched = pool.pop(pool_index)
                updates = carry_forward_fields(candidate, matched, fields)
                updates["id"] = matched.id
                matches.append(SceneMatch(
                    scene_id=matched.id,
                    title=candidate.title,
                    rule=rule,
                    section_index=section_index,
                    scene_index=scene_index,
                    carried_fields=sorted(k for k in updates if k != "id"),
                ))
                log.info(
                    "scene_matched",
                    title=candidate.display_title,
                    scene_id=matched.id,
                    rule=rule.value,
                )
            else:
                updates = {"id": make_id()}
                created_ids.append(updates["id"])
                log.info(
                    "scene_created",
                    title=candidate.display_title,
                    scene_id=updates["id"],
                )

            scenes.append(candidate.model_copy(update=updates))

        merged_sections.append(section.model_copy(update={"scenes": scenes}))
        log.info("scene_section_processed", label=section.label, scenes=len(scenes))

    log.info(
        "scene_merge_completed",
        sections=len(merged_sections),
        matched=len(matches),
        created=len(created_ids),
    )

    if pool:
        log.info("orphaned_scenes", count=len(pool))
        for orphan in pool:
            log.info("orphaned_scene", scene_id=orphan.id, title=orphan.display_title)

    return MergeReport(
        sections=merged_sections,
        matches=matches,
        created_ids=created_ids,
        orphans=pool,
        skipped=skipped,
    )


def merge_scene_changes(existing_sections: Any, new_sections: Any, **kwargs) -> List[Section]:
    """Merge regenerated sections and return only the merged sections."""
    return reconcile_scenes(existing_sections, new_sections, **kwargs).sections
