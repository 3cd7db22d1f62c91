"""Centralized service configuration.

Configuration is read from the environment, with the repo root .env file
loaded on import:
    .env                              - OAuth client, session and webhook secrets
    google/service_account_key.json   - Google service account key (webhook reads)

Environment variables that are already set take precedence over .env values.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

# Repository root (where this package is installed from)
# __file__ is src/sheet_relay/config.py, so 3 levels up
REPO_ROOT = Path(__file__).parent.parent.parent
GOOGLE_DIR = REPO_ROOT / "google"

ENV_FILE = REPO_ROOT / ".env"
GOOGLE_SERVICE_ACCOUNT = GOOGLE_DIR / "service_account_key.json"

# Placeholder that create_app refuses to sign sessions with
DEFAULT_SESSION_SECRET = "change-me"


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from a file.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of loaded variables.
    """
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            # Remove surrounding quotes
            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            # Only set if not already in environment (env vars take precedence)
            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


@dataclass
class Settings:
    """Process-wide settings, loaded once at startup."""

    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_callback_url: str = "http://localhost:3000/auth/google/callback"
    session_secret: str = DEFAULT_SESSION_SECRET
    webhook_token: str | None = None
    n8n_webhook_url: str | None = None
    service_account_file: Path = GOOGLE_SERVICE_ACCOUNT
    permission_propagation_delay: float = 2.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ
        return cls(
            google_client_id=env.get("GOOGLE_CLIENT_ID"),
            google_client_secret=env.get("GOOGLE_CLIENT_SECRET"),
            google_callback_url=env.get("GOOGLE_CALLBACK_URL", cls.google_callback_url),
            session_secret=env.get("SESSION_SECRET", cls.session_secret),
            webhook_token=env.get("WEBHOOK_TOKEN") or None,
            n8n_webhook_url=env.get("N8N_WEBHOOK_URL") or None,
            service_account_file=Path(
                env.get("GOOGLE_SERVICE_ACCOUNT_FILE", str(GOOGLE_SERVICE_ACCOUNT))
            ).expanduser(),
            permission_propagation_delay=float(
                env.get("PERMISSION_PROPAGATION_DELAY", cls.permission_propagation_delay)
            ),
            log_level=env.get("LOG_LEVEL", cls.log_level),
            host=env.get("HOST", cls.host),
            port=int(env.get("PORT", cls.port)),
        )


@lru_cache
def get_settings() -> Settings:
    """Return the cached process settings."""
    return Settings.from_env()


def get_credential_status(settings: Settings | None = None) -> dict:
    """Get status of all configured credentials.

    Returns:
        Dictionary with credential status.
    """
    settings = settings or get_settings()
    return {
        "repo_root": str(REPO_ROOT),
        "env_file": ENV_FILE.exists(),
        "google": {
            "client_id": bool(settings.google_client_id),
            "client_secret": bool(settings.google_client_secret),
            "callback_url": settings.google_callback_url,
            "service_account": settings.service_account_file.exists(),
        },
        "session_secret": settings.session_secret != DEFAULT_SESSION_SECRET,
        "webhook_token": bool(settings.webhook_token),
        "n8n_webhook_url": settings.n8n_webhook_url,
    }


# Auto-load .env from repo root on import
_loaded = _load_env_file(ENV_FILE)
