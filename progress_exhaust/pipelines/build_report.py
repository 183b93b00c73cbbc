from __future__ import annotations

import pandas as pd

from progress_exhaust.config.constants import COLUMN_MAPPING, COLUMNS_ORDER, PROGRESS_SUFFIX, SCORE_SUFFIX
from progress_exhaust.io.writers import fmt_date, save_table
from progress_exhaust.models.schema import Context


def organize_report(progress: pd.DataFrame) -> pd.DataFrame:
    """Rename to report headers and order: fixed columns first, then score and progress columns."""
    report = progress.rename(columns=COLUMN_MAPPING)
    for col in ("Enrolment Date", "Completion Date"):
        if col in report.columns:
            report[col] = report[col].map(fmt_date)
    for col in COLUMNS_ORDER:
        if col not in report.columns:
            report[col] = ""

    score_cols = sorted(c for c in report.columns if c.endswith(SCORE_SUFFIX))
    progress_cols = sorted(c for c in report.columns if c.endswith(PROGRESS_SUFFIX))
    report = report[COLUMNS_ORDER + score_cols + progress_cols]
    return report.astype(object).where(report.notna(), "")


def build_report(ctx: Context) -> pd.DataFrame:
    report = organize_report(ctx.results.get("progress", pd.DataFrame()))
    save_table(report, ctx.settings.table_dir / "progress_exhaust.csv")
    ctx.add_result("progress_report", report)
    return report
