from __future__ import annotations

import logging

import pandas as pd

from progress_exhaust.config.constants import KEY_COLUMNS, PROGRESS_SUFFIX, SCORE_SUFFIX

logger = logging.getLogger(__name__)

FIXED_COLUMNS = KEY_COLUMNS + ["completionPct", "totalScorePct"]


def _pivot_dynamic(rows: pd.DataFrame, id_col: str, value_col: str, suffix: str, fixed_col: str) -> pd.DataFrame:
    base = rows[KEY_COLUMNS + [fixed_col]].drop_duplicates(subset=KEY_COLUMNS, keep="first")

    present = rows[rows[id_col].notna()]
    if present.empty:
        return base.reset_index(drop=True)

    firsts = present.drop_duplicates(subset=KEY_COLUMNS + [id_col], keep="first")
    wide = firsts.pivot(index=KEY_COLUMNS, columns=id_col, values=value_col)
    ids = sorted(wide.columns, key=str)
    wide = wide[ids]
    wide.columns = [f"{column_id}{suffix}" for column_id in ids]

    return base.merge(wide.reset_index(), on=KEY_COLUMNS, how="left")


def pivot_scores(score_rows: pd.DataFrame) -> pd.DataFrame:
    return _pivot_dynamic(score_rows, "contentId", "contentScorePct", SCORE_SUFFIX, "totalScorePct")


def pivot_modules(progress_rows: pd.DataFrame) -> pd.DataFrame:
    return _pivot_dynamic(progress_rows, "moduleId", "modulePct", PROGRESS_SUFFIX, "completionPct")


def pivot_progress(progress_rows: pd.DataFrame, score_rows: pd.DataFrame, how: str = "inner") -> pd.DataFrame:
    scores = pivot_scores(score_rows)
    modules = pivot_modules(progress_rows)

    wide = scores.merge(modules, on=KEY_COLUMNS, how=how)

    if how == "inner":
        keys = pd.concat([scores[KEY_COLUMNS], modules[KEY_COLUMNS]]).drop_duplicates()
        dropped = len(keys) - len(wide)
        if dropped:
            logger.info("Dropped %d learner rows present in only one of progress/score data", dropped)

    score_cols = [c for c in wide.columns if c.endswith(SCORE_SUFFIX)]
    progress_cols = [c for c in wide.columns if c.endswith(PROGRESS_SUFFIX)]
    wide = wide[FIXED_COLUMNS + score_cols + progress_cols]
    wide = wide.sort_values(KEY_COLUMNS).reset_index(drop=True)
    return wide.astype(object).where(wide.notna(), None)

