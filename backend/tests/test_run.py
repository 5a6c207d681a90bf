"""
Tests for the launcher banner.
"""
from neobank.config import get_settings
from run import banner


def test_banner_shows_data_locations():
    settings = get_settings()
    text = banner(settings, "127.0.0.1", 9000)
    assert "http://127.0.0.1:9000" in text
    assert settings.STORAGE_DIR in text
    assert settings.DRAFT_DIR in text
    assert settings.DATABASE_URL in text
    assert settings.DEMO_ORG_ID in text
    assert "Auto-validate uploads: off" in text
