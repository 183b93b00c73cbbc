from __future__ import annotations

from pathlib import Path
import pandas as pd


def ensure_dirs(table_dir: Path) -> None:
    table_dir.mkdir(parents=True, exist_ok=True)


def save_table(df: pd.DataFrame, path: Path) -> None:
    df.to_csv(path, index=False)


def fmt_date(value: object) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    if isinstance(value, pd.Timestamp):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)
