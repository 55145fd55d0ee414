"""Tests for settings loading."""

import pytest

from pdi_intake.settings import ENV_VARS, Settings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(ENV_VARS) + ["PDI_CONFIG"]:
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    """Test load_settings()."""

    def test_defaults(self):
        settings = load_settings()

        assert settings == Settings()
        assert settings.attachment_quota == 5
        assert settings.attachments_bucket == "project-uploads"

    def test_yaml_overrides_defaults(self, tmp_path):
        config = tmp_path / "pdi.yaml"
        config.write_text("attachments_bucket: staging-uploads\nattachment_quota: 3\nwebhook_timeout: 2.5\n")

        settings = load_settings(str(config))

        assert settings.attachments_bucket == "staging-uploads"
        assert settings.attachment_quota == 3
        assert settings.webhook_timeout == 2.5

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        config = tmp_path / "pdi.yaml"
        config.write_text("attachments_bucket: staging-uploads\n")
        monkeypatch.setenv("PDI_CONFIG", str(config))
        monkeypatch.setenv("ATTACHMENTS_BUCKET", "prod-uploads")
        monkeypatch.setenv("ATTACHMENT_QUOTA", "7")

        settings = load_settings()

        assert settings.attachments_bucket == "prod-uploads"
        assert settings.attachment_quota == 7

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_settings(str(tmp_path / "absent.yaml")) == Settings()

    def test_non_mapping_yaml_is_rejected(self, tmp_path):
        config = tmp_path / "pdi.yaml"
        config.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            load_settings(str(config))

    def test_unknown_keys_are_ignored(self, tmp_path):
        config = tmp_path / "pdi.yaml"
        config.write_text("unknown_key: 1\ncors_origin: https://pdi.example.com\n")

        settings = load_settings(str(config))

        assert settings.cors_origin == "https://pdi.example.com"
        assert not hasattr(settings, "unknown_key")
