"""
Heuristics for deciding whether a regenerated scene is the same entity as
an existing one.

Rules are checked in a fixed priority order and the first rule that holds
wins; there is no scoring of how close two scenes are.
"""

import re
from enum import Enum
from typing import Optional

from config import settings
from storyboard.models import Scene

# ASCII word characters and whitespace survive fuzzy title normalization
_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")


class MatchRule(Enum):
    """Rule that established a match, in priority order."""

    TITLE = "title"
    DESCRIPTION = "description"
    CONTENT = "content"
    FUZZY_TITLE = "fuzzy_title"


def _normalize(text: str) -> str:
    return text.lower().strip()


def _fuzzy_title(title: str) -> str:
    return _NON_WORD.sub("", title.lower()).strip()


def _same_text(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return _normalize(a) == _normalize(b)


def _fuzzy_titles_overlap(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False

    title_a = _fuzzy_title(a)
    title_b = _fuzzy_title(b)
    min_length = settings.SCENE_FUZZY_TITLE_MIN_LENGTH

    if len(title_a) > min_length and len(title_b) > min_length:
        return title_a in title_b or title_b in title_a
    return False


def match_rule(candidate: Scene, existing: Scene) -> Optional[MatchRule]:
    """
    Return the first rule under which the two scenes count as the same.

    Args:
        candidate: Scene from the newly generated storyboard
        existing: Scene from the current storyboard

    Returns:
        The matching MatchRule, or None when the scenes are unrelated
    """
    if _same_text(candidate.title, existing.title):
        return MatchRule.TITLE
    if _same_text(candidate.description, existing.description):
        return MatchRule.DESCRIPTION
    if _same_text(candidate.content, existing.content):
        return MatchRule.CONTENT
    if _fuzzy_titles_overlap(candidate.title, existing.title):
        return MatchRule.FUZZY_TITLE
    return None


def are_scenes_similar(candidate: Scene, existing: Scene) -> bool:
    """Whether two scenes are close enough to share an id."""
    return match_rule(candidate, existing) is not None
