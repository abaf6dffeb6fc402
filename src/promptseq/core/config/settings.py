from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Global application-level configuration.

    This class is the single source of truth for:
    - environment selection
    - logging behavior
    - session diagnostics
    - demo availability defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="PROMPTSEQ_",
        env_file=".env",
        extra="ignore",
    )

    # ---- Environment -------------------------------------------------

    env: Literal["local", "staging", "prod"] = "local"

    # ---- Logging -----------------------------------------------------

    log_level: str = "INFO"
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON lines (False -> human readable console output)",
    )

    # ---- Sessions ----------------------------------------------------

    signal_journal_size: int = Field(
        default=50,
        ge=1,
        description="Number of recent signals kept per session for diagnostics",
    )

    # Keys are DemoPrompt values ("popup_a", ...). Missing keys are unavailable.
    demo_availability: dict[str, bool] = Field(
        default_factory=lambda: {
            "popup_a": True,
            "popup_b": False,
            "popup_c": True,
            "popup_d": False,
        },
        description="Static availability answers used by the demo oracle",
    )


# Singleton settings object
settings = AppSettings()
