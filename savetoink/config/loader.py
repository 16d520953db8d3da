"""Configuration loader."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .models import ConfigModel


class Config:
    """Configuration manager."""

    def __init__(self, config_path: Optional[Path] = None, model: Optional[ConfigModel] = None) -> None:
        """Initialize config manager."""
        if config_path is None:
            config_path = Path.home() / ".config" / "savetoink" / "config.yaml"
        self.config_path = config_path
        self._config: Optional[ConfigModel] = model

    @property
    def config(self) -> ConfigModel:
        """Get loaded config."""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration dict."""
        db_config = self.config.postgres.model_dump()

        # Handle password from environment if specified
        if db_config.get("password_env"):
            password = os.environ.get(db_config["password_env"])
            if password:
                db_config["password"] = password

        return db_config

    def get_email_config(self) -> Dict[str, Any]:
        """Get email configuration dict with secrets resolved from the environment."""
        email_config = self.config.email.model_dump()

        for field in ("api_key", "api_secret"):
            env_name = email_config.get(f"{field}_env")
            if env_name and not email_config.get(field):
                value = os.environ.get(env_name)
                if value:
                    email_config[field] = value

        return email_config

    def missing_email_settings(self) -> List[str]:
        """List the email settings required for sending that are not set."""
        email_config = self.get_email_config()
        missing = []
        if not email_config.get("destination_email"):
            missing.append("email.destination_email")
        if not email_config.get("sender_email"):
            missing.append("email.sender_email")
        if not email_config.get("api_key"):
            missing.append(f"email.api_key or ${email_config.get('api_key_env')}")
        if not email_config.get("api_secret"):
            missing.append(f"email.api_secret or ${email_config.get('api_secret_env')}")
        return missing


def load_config(config_path: Path) -> ConfigModel:
    """Load configuration from YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        return ConfigModel(**config_data)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}")
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")


def save_config(config: ConfigModel, config_path: Path) -> None:
    """Save configuration to YAML file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
