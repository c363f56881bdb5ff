"""
Configuration management for the storyboard scene tools
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings"""

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    STORYBOARD_DEBUG_MODE: bool = os.getenv("STORYBOARD_DEBUG_MODE", "false").lower() == "true"

    # Scene matching
    # Fuzzy title matching only applies when both normalized titles are longer than this
    SCENE_FUZZY_TITLE_MIN_LENGTH: int = int(os.getenv("SCENE_FUZZY_TITLE_MIN_LENGTH", "3"))

    # Media references copied from a matched existing scene when the new scene lacks them
    SCENE_CARRY_FORWARD_FIELDS: str = os.getenv(
        "SCENE_CARRY_FORWARD_FIELDS", "clipId,voiceId,musicId,subtitles"
    )

    @property
    def carry_forward_fields(self) -> List[str]:
        """Parse carry-forward fields into a list"""
        return [name.strip() for name in self.SCENE_CARRY_FORWARD_FIELDS.split(",") if name.strip()]


# Global settings instance
settings = Settings()
