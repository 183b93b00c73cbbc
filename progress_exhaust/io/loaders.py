from __future__ import annotations

from pathlib import Path
import pandas as pd

from progress_exhaust.config.constants import BATCH_CONTEXT_PREFIX

ACTIVITY_AGG_COLUMNS = {"user_id": "userId", "activity_id": "activityId", "context_id": "contextId"}
HIERARCHY_COLUMNS = {"identifier": "courseId"}
ASSESSMENT_COLUMNS = {
    "course_id": "courseId",
    "batch_id": "batchId",
    "user_id": "userId",
    "content_id": "contentId",
    "attempt_id": "attemptId",
    "total_score": "totalScore",
    "total_max_score": "totalMaxScore",
    "grand_total": "grandTotal",
}
ENROLMENT_COLUMNS = {
    "courseid": "courseId",
    "batchid": "batchId",
    "userid": "userId",
    "enrolleddate": "enrolledDate",
    "completedon": "completedOn",
    "issued_certificates": "issuedCertificates",
    "username": "userName",
}


def load_pkl(data_dir: Path, name: str) -> pd.DataFrame:
    path = data_dir / f"{name}.pkl"
    return pd.read_pickle(path)


def to_datetime(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], errors="coerce")
    return df


ID_COLUMNS = ["courseId", "batchId", "userId", "activityId", "contentId", "attemptId"]


def _as_id(value: object) -> object:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    return str(value)


def normalize_ids(df: pd.DataFrame, cols: list[str] = ID_COLUMNS) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = df[col].map(_as_id).astype(object)
    return df


def strip_batch_prefix(series: pd.Series, prefix: str = BATCH_CONTEXT_PREFIX) -> pd.Series:
    return series.astype(str).str.removeprefix(prefix)


def load_all(data_dir: Path) -> dict[str, pd.DataFrame]:
    data = {
        "user_activity_agg": load_pkl(data_dir, "user_activity_agg").rename(columns=ACTIVITY_AGG_COLUMNS),
        "content_hierarchy": load_pkl(data_dir, "content_hierarchy").rename(columns=HIERARCHY_COLUMNS),
        "assessment_aggregator": load_pkl(data_dir, "assessment_aggregator").rename(columns=ASSESSMENT_COLUMNS),
        "user_enrolments": load_pkl(data_dir, "user_enrolments").rename(columns=ENROLMENT_COLUMNS),
    }

    for name in data:
        data[name] = normalize_ids(data[name])
    data["content_hierarchy"]["courseId"] = strip_batch_prefix(data["content_hierarchy"]["courseId"])
    data["user_enrolments"] = to_datetime(data["user_enrolments"], ["enrolledDate", "completedOn"])

    return data
