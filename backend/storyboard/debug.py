"""
Debug logging utilities for the scene reconciler.
"""

import structlog
from config import settings

logger = structlog.get_logger()


def debug_log(event: str, **kwargs):
    """
    Log debug information only when STORYBOARD_DEBUG_MODE is enabled.

    Args:
        event: Event name for structured logging
        **kwargs: Additional key-value pairs to log
    """
    if settings.STORYBOARD_DEBUG_MODE:
        logger.info(f"storyboard_debug_{event}", **kwargs)


def log_scene_pool(pool: list):
    """Log the claimable existing scenes at the start of a merge."""
    debug_log(
        "scene_pool",
        scenes=[{"id": scene.id, "title": scene.title} for scene in pool],
    )


def log_rule_checked(candidate_title, existing_id, rule):
    """Log the outcome of comparing a candidate against one pool member."""
    debug_log(
        "similarity_checked",
        candidate_title=candidate_title,
        existing_id=existing_id,
        rule=rule.value if rule is not None else None,
    )
