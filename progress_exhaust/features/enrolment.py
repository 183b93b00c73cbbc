from __future__ import annotations

import pandas as pd

from progress_exhaust.config.constants import CERTIFICATE_ISSUED, KEY_COLUMNS
from progress_exhaust.io.loaders import normalize_ids
from progress_exhaust.models.schema import CollectionBatch

ENROLMENT_COLUMNS = [
    "courseId",
    "batchId",
    "userId",
    "enrolledDate",
    "completedOn",
    "certificateStatus",
    "collectionName",
    "batchName",
    "userName",
    "state",
    "district",
]


def _has_items(value: object) -> bool:
    if value is None or isinstance(value, (str, bytes)):
        return False
    try:
        return len(value) > 0
    except TypeError:
        return False


def certificate_status(enrolments: pd.DataFrame) -> pd.Series:
    issued = pd.Series(False, index=enrolments.index)
    for col in ("certificates", "issuedCertificates"):
        if col in enrolments.columns:
            issued |= enrolments[col].map(_has_items)
    return issued.map({True: CERTIFICATE_ISSUED, False: ""})


def prepare_enrolments(enrolments: pd.DataFrame) -> pd.DataFrame:
    prepared = normalize_ids(enrolments.copy())
    prepared["certificateStatus"] = certificate_status(prepared)
    for col in ENROLMENT_COLUMNS:
        if col not in prepared.columns:
            prepared[col] = None
    return prepared[ENROLMENT_COLUMNS].drop_duplicates(subset=KEY_COLUMNS, keep="first").reset_index(drop=True)


def collection_batches(enrolments: pd.DataFrame) -> list[CollectionBatch]:
    pairs = enrolments[["batchId", "courseId"]].dropna().drop_duplicates().sort_values(["courseId", "batchId"])
    return [CollectionBatch(batch_id=batch_id, collection_id=course_id) for batch_id, course_id in pairs.itertuples(index=False)]
