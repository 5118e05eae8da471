"""Runtime configuration for orchestration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

StartMethod = Literal["fork", "spawn", "forkserver"]


class ParataskSettings(BaseModel):
    """
    Settings shared by every orchestrate() invocation of one Orchestrator.

    Both fields default to None, meaning "use the platform default".
    """

    exchange_dir: Path | None = Field(
        default=None,
        description="Directory holding in-flight task payloads (default: {tempdir}/paratask)",
        examples=["/var/tmp/paratask"],
    )
    start_method: StartMethod | None = Field(
        default=None,
        description="multiprocessing start method used for workers",
        examples=["fork", "spawn"],
    )

    @classmethod
    def from_env(cls) -> ParataskSettings:
        """Load settings from PARATASK_* environment variables."""
        exchange_dir = os.getenv("PARATASK_EXCHANGE_DIR")
        return cls(
            exchange_dir=Path(exchange_dir) if exchange_dir else None,
            start_method=os.getenv("PARATASK_START_METHOD") or None,
        )
