from __future__ import annotations

import numpy as np
import pandas as pd

SCORE_COLUMNS = ["courseId", "batchId", "userId", "contentId", "totalScorePct", "contentScorePct"]


def _fmt_pct(values: pd.Series) -> pd.Series:
    return values.map(lambda v: None if pd.isna(v) else f"{int(v)}%")


def ceil_percentage(score: pd.Series, max_score: pd.Series) -> pd.Series:
    score = pd.to_numeric(score, errors="coerce").astype("float64")
    max_score = pd.to_numeric(max_score, errors="coerce").astype("float64")
    max_score = max_score.where(max_score != 0)
    return np.ceil(score * 100 / max_score)


def grand_total_percentage(grand_total: pd.Series) -> pd.Series:
    parts = grand_total.where(grand_total.notna(), "").astype(str).str.split("/", n=1, expand=True)
    if parts.shape[1] < 2:
        return pd.Series(np.nan, index=grand_total.index)
    return ceil_percentage(parts[0].str.strip(), parts[1].str.strip())


def aggregate_scores(attempts: pd.DataFrame) -> pd.DataFrame:
    # totalScorePct is summed over all contents of the learner, so every content row shares it.
    if attempts.empty:
        return pd.DataFrame(columns=SCORE_COLUMNS)

    scores = attempts.copy()
    for col in ("totalScore", "totalMaxScore"):
        scores[col] = pd.to_numeric(scores[col], errors="coerce").fillna(0)
    partition = scores.groupby(["userId", "batchId", "courseId"], dropna=False)
    scores["aggScore"] = partition["totalScore"].transform("sum")
    scores["aggMaxScore"] = partition["totalMaxScore"].transform("sum")
    scores["totalScorePct"] = _fmt_pct(ceil_percentage(scores["aggScore"], scores["aggMaxScore"]))
    scores["contentScorePct"] = _fmt_pct(grand_total_percentage(scores["grandTotal"]))

    sort_cols = ["courseId", "batchId", "userId", "contentId"] + (["attemptId"] if "attemptId" in scores.columns else [])
    scores = scores.sort_values(sort_cols, kind="stable")
    scores = scores.drop_duplicates(subset=["courseId", "batchId", "userId", "contentId"], keep="first")
    return scores[SCORE_COLUMNS].reset_index(drop=True)
