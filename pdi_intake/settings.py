"""Runtime configuration for the proposal intake services.

Values come from built-in defaults, then an optional YAML file, then environment
variables (highest precedence).
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Environment variable -> Settings attribute
ENV_VARS = {
    "AWS_REGION": "aws_region",
    "ATTACHMENTS_BUCKET": "attachments_bucket",
    "PROJECTS_TABLE": "projects_table",
    "ATTACHMENTS_TABLE": "attachments_table",
    "ATTACHMENTS_PROJECT_INDEX": "attachments_project_index",
    "PROJECTS_OWNER_INDEX": "projects_owner_index",
    "ATTACHMENTS_WEBHOOK_URL": "attachments_webhook_url",
    "SUBMISSION_WEBHOOK_URL": "submission_webhook_url",
    "WEBHOOK_TIMEOUT": "webhook_timeout",
    "FUNCTION_PREFIX": "function_prefix",
    "ATTACHMENT_QUOTA": "attachment_quota",
    "CORS_ORIGIN": "cors_origin",
    "WEBHOOK_LOG_DIR": "webhook_log_dir",
}


@dataclass
class Settings:
    """Deployment settings shared by the gateway, notifiers and Lambda handlers."""

    aws_region: str = "us-east-2"
    attachments_bucket: str = "project-uploads"
    projects_table: str = "projects"
    attachments_table: str = "project_attachments"
    attachments_project_index: str = "project_id-index"
    projects_owner_index: str = "user_id-index"
    attachments_webhook_url: str = ""
    submission_webhook_url: str = ""
    webhook_timeout: float = 10.0
    function_prefix: str = "pdi-"
    attachment_quota: int = 5
    cors_origin: str = "*"
    webhook_log_dir: str = "logs"

    def update(self, values: Dict[str, Any]) -> None:
        """Apply overrides, coercing each value to the declared field type."""
        known = {f.name: f.type for f in fields(self)}
        for key, value in values.items():
            if key not in known:
                logger.warning(f"Ignoring unknown setting: {key}")
                continue
            field_type = known[key]
            if field_type in (int, "int"):
                value = int(value)
            elif field_type in (float, "float"):
                value = float(value)
            else:
                value = str(value)
            setattr(self, key, value)


def _load_yaml(config_path: Optional[str]) -> Dict[str, Any]:
    if config_path and os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        return data
    return {}


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: Optional path to a YAML file; defaults to ``PDI_CONFIG`` env var

    Returns:
        Populated Settings instance
    """
    settings = Settings()
    settings.update(_load_yaml(config_path or os.environ.get("PDI_CONFIG")))

    env_values = {
        attr: os.environ[name] for name, attr in ENV_VARS.items() if os.environ.get(name)
    }
    settings.update(env_values)
    return settings
