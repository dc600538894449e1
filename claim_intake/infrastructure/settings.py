"""Service configuration loaded from the environment."""

import logging
import os
from typing import Dict

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class IntakeSettings(BaseModel):
    """Configuration for the claim intake service."""

    whatsapp_token: str = ""
    user_phone_number_id: str = ""
    checkers_phone_number_id: str = ""
    whatsapp_api_version: str = "v17.0"
    whatsapp_api_base_url: str = "https://graph.facebook.com"
    verify_token: str = ""
    app_secret: str = ""

    store_backend: str = "memory"
    database_url: str = "sqlite:///./claim_intake.db"
    media_storage_dir: str = "./media"

    policy_cache_ttl: float = 30.0
    http_timeout: float = 30.0
    enable_debug_commands: bool = False

    @property
    def phone_number_ids(self) -> Dict[str, str]:
        return {
            "user": self.user_phone_number_id,
            "factChecker": self.checkers_phone_number_id,
        }

    @classmethod
    def from_env(cls) -> "IntakeSettings":
        """Create settings from environment variables."""
        settings = cls(
            whatsapp_token=os.getenv("WHATSAPP_TOKEN", ""),
            user_phone_number_id=os.getenv("WHATSAPP_USER_PHONE_NUMBER_ID", ""),
            checkers_phone_number_id=os.getenv("WHATSAPP_CHECKERS_PHONE_NUMBER_ID", ""),
            whatsapp_api_version=os.getenv("WHATSAPP_API_VERSION", "v17.0"),
            whatsapp_api_base_url=os.getenv("WHATSAPP_API_BASE_URL", "https://graph.facebook.com"),
            verify_token=os.getenv("WHATSAPP_VERIFY_TOKEN", ""),
            app_secret=os.getenv("WHATSAPP_APP_SECRET", ""),
            store_backend=os.getenv("STORE_BACKEND", "memory"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./claim_intake.db"),
            media_storage_dir=os.getenv("MEDIA_STORAGE_DIR", "./media"),
            policy_cache_ttl=float(os.getenv("POLICY_CACHE_TTL", "30")),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            enable_debug_commands=_env_bool("ENABLE_DEBUG_COMMANDS"),
        )

        if not settings.whatsapp_token:
            logger.warning("⚠️ WHATSAPP_TOKEN not set - replies, read receipts and media downloads will fail")
        if not settings.app_secret:
            logger.warning("⚠️ WHATSAPP_APP_SECRET not set - webhook signatures will not be checked")
        if settings.enable_debug_commands:
            logger.warning("⚠️ Debug slash commands are ENABLED - never run this way in production")
        return settings
