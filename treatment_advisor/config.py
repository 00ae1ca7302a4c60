from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class AdvisorConfig:
    catalog_path: Path = Path(
        os.getenv("TREATMENT_CATALOG_PATH", str(_DATA_DIR / "work_instructions.csv"))
    )
    steel_types_path: Path = Path(
        os.getenv("STEEL_TYPES_PATH", str(_DATA_DIR / "steel_types.csv"))
    )
    session_secret: str = os.getenv("SESSION_SECRET", "treatment-advisor-secret-change-in-production")
    history_limit: int = 50


DEFAULT_ADVISOR_CONFIG = AdvisorConfig()
