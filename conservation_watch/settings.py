"""
Centralised settings for the conservation feed (env-first, code-light).

API keys are server-side secrets: they come from the environment (or a `.env`
file loaded by the CLI) and are never written into the YAML source config.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from conservation_watch.config_loader import DEFAULT_CONFIG_PATH
from conservation_watch.models import FetchAllOptions
from conservation_watch.security import is_configured_key

logger = logging.getLogger(__name__)


@dataclass
class WatchSettings:
    regulations_api_key: Optional[str]
    open_states_api_key: Optional[str]
    sources_path: Path
    user_agent: Optional[str] = None

    def fetch_options(self) -> FetchAllOptions:
        return FetchAllOptions(
            regulations_api_key=self.regulations_api_key,
            open_states_api_key=self.open_states_api_key,
        )


def _key_from_env(*names: str) -> Optional[str]:
    for name in names:
        raw = os.getenv(name)
        if is_configured_key(raw):
            return raw.strip()
        if raw and raw.strip():
            logger.warning("Ignoring placeholder value in %s", name)
    return None


def load_settings() -> WatchSettings:
    sources_env = os.getenv("CONSERVATION_SOURCES_PATH")
    return WatchSettings(
        regulations_api_key=_key_from_env("REGULATIONS_GOV_API_KEY", "REGULATIONS_API_KEY"),
        open_states_api_key=_key_from_env("OPENSTATES_API_KEY", "OPEN_STATES_API_KEY"),
        sources_path=Path(sources_env) if sources_env else DEFAULT_CONFIG_PATH,
        user_agent=os.getenv("CONSERVATION_USER_AGENT") or None,
    )
