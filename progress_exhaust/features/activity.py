from __future__ import annotations

import pandas as pd

from progress_exhaust.config.constants import BATCH_CONTEXT_PREFIX

COUNTER_COLUMNS = ["userId", "activityId", "completedCount", "contextId"]


def batch_context(batch_id: str) -> str:
    return f"{BATCH_CONTEXT_PREFIX}{batch_id}"


def _completed_from_agg(agg: object) -> int:
    if isinstance(agg, dict):
        value = agg.get("completedCount", 0)
        return int(value) if value is not None and not pd.isna(value) else 0
    return 0


def normalize_counters(activity_agg: pd.DataFrame) -> pd.DataFrame:
    counters = activity_agg.copy()
    if "completedCount" not in counters.columns:
        if "agg" in counters.columns:
            counters["completedCount"] = counters["agg"].map(_completed_from_agg)
        else:
            counters["completedCount"] = 0
    counters["completedCount"] = pd.to_numeric(counters["completedCount"], errors="coerce").fillna(0).clip(lower=0).astype(int)
    return counters[COUNTER_COLUMNS]


class ActivityCounterLookup:
    """Completed-unit counts keyed by ``(activityId, contextId, userId)``."""

    def __init__(self, activity_agg: pd.DataFrame):
        self.counters = normalize_counters(activity_agg)

    def for_batch(self, batch_id: str) -> "ActivityCounterLookup":
        scoped = self.counters[self.counters["contextId"] == batch_context(batch_id)]
        return ActivityCounterLookup(scoped)

    def learners(self) -> pd.DataFrame:
        return self.counters[["userId", "contextId"]].drop_duplicates().sort_values(["userId", "contextId"]).reset_index(drop=True)

    def attach(self, frame: pd.DataFrame, activity_col: str, out_col: str) -> pd.DataFrame:
        counts = (
            self.counters.groupby(["activityId", "contextId", "userId"], dropna=False)["completedCount"]
            .max()
            .reset_index()
            .rename(columns={"activityId": activity_col, "completedCount": out_col})
        )
        merged = frame.merge(counts, on=[activity_col, "contextId", "userId"], how="left")
        merged[out_col] = merged[out_col].fillna(0).astype(int)
        return merged
