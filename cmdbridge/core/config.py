"""
Configuration management for Command Bridge.

Handles environment-based configuration and OpenClaw gateway auto-detection.
"""
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
import yaml

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "development")

    # Debug - handle non-boolean values gracefully
    debug: bool = False

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        """Parse debug from environment, handling non-boolean values."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        debug_env = os.getenv("DEBUG", "false").lower()
        return debug_env in ("true", "1", "yes")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", os.getenv("PORT", "3333")))

    # CORS
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")

    # OpenClaw CLI (the external scheduler)
    openclaw_bin: str = os.getenv("OPENCLAW_BIN", "openclaw")
    cli_timeout: int = int(os.getenv("CLI_TIMEOUT", "30"))

    # OpenClaw gateway
    openclaw_config_path: Optional[str] = os.getenv("OPENCLAW_CONFIG_PATH", None)
    openclaw_gateway_url: str = os.getenv("OPENCLAW_GATEWAY_URL", "http://localhost:18789")
    openclaw_gateway_token: Optional[str] = os.getenv("OPENCLAW_GATEWAY_TOKEN", None)
    openclaw_workspace: str = os.getenv(
        "OPENCLAW_WORKSPACE", str(Path.home() / ".openclaw" / "workspace")
    )

    class Config:
        # Load .env from project root (cmdbridge/core/config.py -> parent.parent.parent)
        env_file = str(Path(__file__).resolve().parent.parent.parent / ".env")
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()


@dataclass
class GatewayConfig:
    """Resolved gateway connection details. The token is never sent to clients."""
    url: str
    token: str = ""
    source: Optional[str] = None

    @property
    def token_configured(self) -> bool:
        return bool(self.token)


def _config_candidates(cfg: Settings) -> List[Path]:
    home = Path.home()
    paths = [
        cfg.openclaw_config_path,
        str(home / ".openclaw" / "gateway.yaml"),
        str(home / ".openclaw" / "openclaw.json"),
    ]
    return [Path(p) for p in paths if p]


def _load_config_file(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    return data if isinstance(data, dict) else {}


def _apply_config(data: dict, found: GatewayConfig) -> None:
    gateway = data.get("gateway") if isinstance(data.get("gateway"), dict) else {}
    if gateway.get("address"):
        found.url = str(gateway["address"])
    if gateway.get("token") and not found.token:
        found.token = str(gateway["token"])
    if data.get("token") and not found.token:
        found.token = str(data["token"])


def detect_gateway_config(cfg: Optional[Settings] = None) -> GatewayConfig:
    """
    Resolve the OpenClaw gateway URL and token.

    Environment values are the starting point; gateway.yaml / openclaw.json
    override the URL, and supply the token only when none was set explicitly.
    """
    cfg = cfg or settings
    found = GatewayConfig(url=cfg.openclaw_gateway_url, token=cfg.openclaw_gateway_token or "")
    for path in _config_candidates(cfg):
        if not path.is_file():
            continue
        if path.suffix not in (".yaml", ".yml", ".json"):
            continue
        try:
            _apply_config(_load_config_file(path), found)
            found.source = str(path)
            logger.info("Found gateway config at %s", path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Failed to parse gateway config %s: %s", path, e)
    return found


def get_workspace(cfg: Optional[Settings] = None) -> Path:
    """Return the OpenClaw workspace, or the current directory when it does not exist."""
    cfg = cfg or settings
    workspace = Path(cfg.openclaw_workspace).expanduser()
    if not workspace.is_dir():
        logger.warning("Workspace not found at %s, using current directory", workspace)
        return Path.cwd()
    return workspace
