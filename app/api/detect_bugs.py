"""
POST /api/detect-bugs
=====================
Runs the bug detection stage for one changed file, or for a batch of files.

Findings are serialised with their wire names (filePath, lineStart, ...).
An empty bug_reports list means "no issues found" — whether the model said
so or its reply could not be used; the anomaly kinds tell the two apart.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from app.agents.bug_detector import BugDetector
from app.detector.diagnostics import DetectionDiagnostics
from app.models.bug_report import BugReport
from app.models.file_change import FileChange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bug Detection"])

# Maximum files accepted by the batch endpoint
_MAX_BATCH_FILES = 50

_detector: Optional[BugDetector] = None


def get_detector() -> BugDetector:
    """Shared detector, so provider health survives across requests."""
    global _detector
    if _detector is None:
        _detector = BugDetector()
    return _detector


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class DetectBugsRequest(FileChange):
    debug: Optional[bool] = None

    @field_validator("file_path")
    @classmethod
    def file_path_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("file_path must not be empty")
        return v


class DetectBugsResponse(BaseModel):
    file_path: str
    bug_reports: List[BugReport]
    total: int
    anomalies: List[str] = []


class BatchDetectRequest(BaseModel):
    files: List[FileChange]
    debug: Optional[bool] = None

    @field_validator("files")
    @classmethod
    def batch_size(cls, v: List[FileChange]) -> List[FileChange]:
        if not v:
            raise ValueError("files must not be empty")
        if len(v) > _MAX_BATCH_FILES:
            raise ValueError(f"At most {_MAX_BATCH_FILES} files per batch")
        return v


class BatchDetectResponse(BaseModel):
    results: List[DetectBugsResponse]
    total: int


def _to_response(file_path: str, findings: List[BugReport], sink: DetectionDiagnostics) -> DetectBugsResponse:
    return DetectBugsResponse(
        file_path=file_path,
        bug_reports=findings,
        total=len(findings),
        anomalies=[a.kind for a in sink.anomalies],
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@router.post("/detect-bugs", response_model=DetectBugsResponse)
async def detect_bugs(
    request: DetectBugsRequest,
    detector: BugDetector = Depends(get_detector),
) -> DetectBugsResponse:
    debug = detector.debug if request.debug is None else request.debug
    sink = DetectionDiagnostics(debug=debug, file_path=request.file_path)
    findings = await detector.detect(
        request.file_path, request.file_content, request.patch, sink
    )
    return _to_response(request.file_path, findings, sink)


@router.post("/detect-bugs/batch", response_model=BatchDetectResponse)
async def detect_bugs_batch(
    request: BatchDetectRequest,
    detector: BugDetector = Depends(get_detector),
) -> BatchDetectResponse:
    debug = detector.debug if request.debug is None else request.debug
    sinks = [DetectionDiagnostics(debug=debug, file_path=f.file_path) for f in request.files]
    logger.info("Batch bug detection for %d files", len(request.files))

    results = await detector.detect_many(request.files, sinks)
    responses = [
        _to_response(f.file_path, findings, sink)
        for f, findings, sink in zip(request.files, results, sinks)
    ]
    return BatchDetectResponse(
        results=responses,
        total=sum(r.total for r in responses),
    )
