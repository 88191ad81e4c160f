"""
Grid Duel — Settings
Read from the environment, with a .env file loaded first when present.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

DEFAULT_MODEL = "gpt-4o"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class Settings:
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_MODEL
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    log_level: str = "INFO"
    strict_energy: bool = True

    @property
    def narration_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def persistence_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    load_dotenv(dotenv_path)
    return Settings(
        openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
        openai_model=os.environ.get("GRIDDUEL_MODEL", DEFAULT_MODEL),
        supabase_url=os.environ.get("SUPABASE_URL") or None,
        supabase_key=os.environ.get("SUPABASE_KEY") or None,
        log_level=os.environ.get("GRIDDUEL_LOG_LEVEL", "INFO").upper(),
        strict_energy=_as_bool(os.environ.get("GRIDDUEL_STRICT_ENERGY", "true")),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")
