"""
Tests for settings parsing.
"""

from unittest.mock import patch

from config import Settings, settings


class TestSettings:
    """Test Settings defaults and helpers."""

    def test_carry_forward_defaults(self):
        """Test that the default carry-forward fields are the scene media fields."""

        """Test that the default carry-forward fields are the scene media fields.
test_config.py"""
        assert Settings().carry_forward_fields == ["clipId", "voiceId", "musicId", "subtitles"]

    def test_carry_forward_parsing(self):
        """Test that blank entries and spaces are dropped from the field list."""
        with patch.object(settings, "SCENE_CARRY_FORWARD_FIELDS", " clipId ,, imageId,"):
            assert settings.carry_forward_fields == ["clipId", "imageId"]

    def test_fuzzy_min_length_is_int(self):
        """Test that the fuzzy title length is parsed as an integer."""
        assert isinstance(settings.SCENE_FUZZY_TITLE_MIN_LENGTH, int)
