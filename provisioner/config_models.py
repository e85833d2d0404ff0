# provisioner/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for application configuration.

This module defines the structured settings for the provisioner, including
defaults, type annotations and descriptions, plus the templates used to
render the OpenClaw ``.env`` file and systemd unit. It utilizes Pydantic
for data validation and settings management.
"""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Default Static Values (can be overridden by config file/env/cli) ---
LOG_PREFIX_DEFAULT: str = "[OPENCLAW-SETUP]"

PRIMARY_PROVIDER_DEFAULT: str = "z.ai"
PRIMARY_MODEL_DEFAULT: str = "glm4.7"
FALLBACK_PROVIDER_DEFAULT: str = "openrouter"
FALLBACK_MODELS_DEFAULT: List[str] = [
    "google/gemini-2.5-flash",
    "moonshotai/kimi-k2.5",
]

SERVICE_USER_DEFAULT: str = "openclaw"
GATEWAY_PORT_DEFAULT: int = 18789
REPO_URL_DEFAULT: str = "https://github.com/mortalezz/openclaw.git"
SERVICE_NAME_DEFAULT: str = "openclaw"
APP_LOG_LEVEL_DEFAULT: str = "info"

REBOOT_MARKER_FILE_DEFAULT: str = "/tmp/.openclaw-setup-rebooted"
REBOOT_REQUIRED_FILE_DEFAULT: str = "/var/run/reboot-required"
RESUME_LOG_FILE_DEFAULT: str = "/var/log/openclaw-provision.log"

ENV_FILE_TEMPLATE_DEFAULT: str = """\
# Port settings
PORT={gateway_port}

# Primary provider
PRIMARY_PROVIDER={primary_provider}
PRIMARY_MODEL={primary_model}
ZAI_API_KEY={zai_api_key}

# Fallback provider
FALLBACK_PROVIDER={fallback_provider}
FALLBACK_MODELS={fallback_models}
OPENROUTER_API_KEY={openrouter_api_key}

LOG_LEVEL={log_level}
"""

SYSTEMD_UNIT_TEMPLATE_DEFAULT: str = """\
[Unit]
Description={description}
After=network.target

[Service]
Type=simple
User={service_user}
WorkingDirectory={install_dir}
ExecStart={exec_start}
Restart=on-failure
RestartSec={restart_sec}
EnvironmentFile={env_file}

[Install]
WantedBy=multi-user.target
"""

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}


class ProviderSettings(BaseModel):
    """Primary and fallback AI provider selection written to the .env file."""

    primary_provider: str = Field(default=PRIMARY_PROVIDER_DEFAULT, description="Primary AI provider identifier.")
    primary_model: str = Field(default=PRIMARY_MODEL_DEFAULT, description="Model requested from the primary provider.")
    fallback_provider: str = Field(default=FALLBACK_PROVIDER_DEFAULT, description="Fallback AI provider identifier.")
    fallback_models: List[str] = Field(
        default_factory=lambda: list(FALLBACK_MODELS_DEFAULT),
        description="Ordered fallback models. Accepts a list or a comma-separated string.",
    )

    @field_validator("fallback_models", mode="before")
    @classmethod
    def _split_comma_separated(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


class OpenClawSettings(BaseSettings):
    """Service account, source checkout and systemd unit for OpenClaw."""
    model_config = SettingsConfigDict(
        env_prefix='OPENCLAW_',
        extra='ignore'
    )

    service_user: str = Field(default=SERVICE_USER_DEFAULT, description="System account that owns and runs OpenClaw.")
    install_dir: Optional[Path] = Field(
        default=None,
        description="Checkout directory. Defaults to /home/<service_user>/openclaw.",
    )
    repo_url: str = Field(default=REPO_URL_DEFAULT, description="Git URL of the OpenClaw source tree.")
    gateway_port: int = Field(default=GATEWAY_PORT_DEFAULT, ge=1, le=65535, description="TCP port of the gateway.")
    log_level: str = Field(default=APP_LOG_LEVEL_DEFAULT, description="LOG_LEVEL written to the .env file.")

    service_name: str = Field(default=SERVICE_NAME_DEFAULT, description="systemd unit name, without .service.")
    service_description: str = Field(default="OpenClaw AI Gateway", description="Description= of the unit.")
    exec_start: str = Field(default="/usr/bin/npm start", description="ExecStart= of the unit.")
    restart_sec: int = Field(default=5, ge=0, description="RestartSec= of the unit.")
    ssh_source_dir: Path = Field(
        default=Path("/root/.ssh"),
        description="Directory whose authorized_keys is copied to the service account.",
    )

    env_file_template: str = Field(
        default=ENV_FILE_TEMPLATE_DEFAULT,
        description="Template for the .env file. Placeholders: {gateway_port}, {primary_provider}, "
                    "{primary_model}, {zai_api_key}, {fallback_provider}, {fallback_models}, "
                    "{openrouter_api_key}, {log_level}.",
    )
    systemd_unit_template: str = Field(
        default=SYSTEMD_UNIT_TEMPLATE_DEFAULT,
        description="Template for the systemd unit. Placeholders: {description}, {service_user}, "
                    "{install_dir}, {exec_start}, {restart_sec}, {env_file}.",
    )

    @property
    def app_dir(self) -> Path:
        """The checkout directory, derived from the service user when unset."""
        if self.install_dir is not None:
            return Path(self.install_dir)
        return Path("/home") / self.service_user / "openclaw"

    @property
    def env_file_path(self) -> Path:
        return self.app_dir / ".env"

    @property
    def service_file_path(self) -> Path:
        return Path("/etc/systemd/system") / f"{self.service_name}.service"


class RebootSettings(BaseSettings):
    """Paths and timings of the reboot-and-resume cycle."""
    model_config = SettingsConfigDict(
        env_prefix='OPENCLAW_REBOOT_',
        extra='ignore'
    )

    marker_file: Path = Field(default=Path(REBOOT_MARKER_FILE_DEFAULT),
                              description="Exists while a reboot triggered by this provisioner is pending.")
    reboot_required_file: Path = Field(default=Path(REBOOT_REQUIRED_FILE_DEFAULT),
                                       description="Sentinel created by the OS when an upgrade needs a reboot.")
    delay_seconds: float = Field(default=3, ge=0, description="Pause between scheduling the resume and rebooting.")
    resume_log_file: Path = Field(default=Path(RESUME_LOG_FILE_DEFAULT),
                                  description="File receiving the output of the resumed run.")


class AppSettings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(extra='ignore')

    zai_api_key: str = Field(default="", description="z.ai API key (env ZAI_API_KEY).", exclude=True)
    openrouter_api_key: str = Field(default="", description="OpenRouter API key (env OPENROUTER_API_KEY).",
                                    exclude=True)

    log_prefix: str = Field(default=LOG_PREFIX_DEFAULT, description="Prefix for console log lines.")
    log_level: str = Field(default="INFO", description="Provisioner log level (DEBUG, INFO, WARNING, ...).")
    log_file: Optional[Path] = Field(default=None, description="Optional JSON-lines log file.")

    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    openclaw: OpenClawSettings = Field(default_factory=OpenClawSettings)
    reboot: RebootSettings = Field(default_factory=RebootSettings)

    symbols: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOLS_DEFAULT))

    def missing_secrets(self) -> List[str]:
        """Names of required secret environment variables that are unset or empty."""
        missing = []
        if not self.zai_api_key:
            missing.append("ZAI_API_KEY")
        if not self.openrouter_api_key:
            missing.append("OPENROUTER_API_KEY")
        return missing
