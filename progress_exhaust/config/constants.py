from __future__ import annotations

COLLECTION_MIME_TYPE = "application/vnd.ekstep.content-collection"
DEFAULT_VISIBILITY = "Default"
COURSE_CONTENT_TYPE = "Course"

BATCH_CONTEXT_PREFIX = "cb:"

MAX_HIERARCHY_DEPTH = 2

SCORE_SUFFIX = " - Score"
PROGRESS_SUFFIX = " - Progress"

KEY_COLUMNS = ["courseId", "batchId", "userId"]

COLUMNS_ORDER = [
    "Batch Id",
    "Batch Name",
    "Collection Id",
    "Collection Name",
    "User UUID",
    "User Name",
    "State",
    "District",
    "Enrolment Date",
    "Completion Date",
    "Certificate Status",
    "Progress",
    "Total Score",
]

COLUMN_MAPPING = {
    "courseId": "Collection Id",
    "collectionName": "Collection Name",
    "batchId": "Batch Id",
    "batchName": "Batch Name",
    "userId": "User UUID",
    "userName": "User Name",
    "state": "State",
    "district": "District",
    "enrolledDate": "Enrolment Date",
    "completedOn": "Completion Date",
    "completionPct": "Progress",
    "totalScorePct": "Total Score",
    "certificateStatus": "Certificate Status",
}

CERTIFICATE_ISSUED = "Issued"
