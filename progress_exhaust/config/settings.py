from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

JOIN_MODES = ("inner", "outer")


def _load_env(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip().lstrip("\ufeff")
        value = value.strip().strip("\"").strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    data_dir: Path
    output_dir: Path
    table_dir: Path
    hierarchy_depth: int
    join_how: str
    log_level: str


def get_settings() -> Settings:
    base_dir = Path(__file__).resolve().parents[1]
    _load_env(base_dir / ".env")
    output_dir = base_dir / "output"

    join_how = os.getenv("PROGRESS_JOIN_HOW", "inner").strip().lower()
    if join_how not in JOIN_MODES:
        raise ValueError(f"PROGRESS_JOIN_HOW must be one of {JOIN_MODES}, got {join_how!r}")

    data_dir = os.getenv("PROGRESS_DATA_DIR")

    return Settings(
        base_dir=base_dir,
        data_dir=Path(data_dir) if data_dir else base_dir / "db",
        output_dir=output_dir,
        table_dir=output_dir / "tables",
        hierarchy_depth=2,
        join_how=join_how,
        log_level=os.getenv("PROGRESS_LOG_LEVEL", "INFO").upper(),
    )
