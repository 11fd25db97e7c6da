"""
Report Validator
================
Filters decoded candidates down to well-formed report payloads.

Each element is checked on its own against CandidateReport. A rejected
element is dropped and reported to the diagnostics sink; it never takes
its siblings down with it. Anything other than a list yields nothing.
"""
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from app.detector.diagnostics import DetectionDiagnostics
from app.detector.errors import INVALID_CANDIDATE, UNEXPECTED_SHAPE
from app.models.bug_report import CandidateReport

logger = logging.getLogger(__name__)


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def validate_candidates(
    candidates: Any,
    diagnostics: Optional[DetectionDiagnostics] = None,
) -> List[CandidateReport]:
    """
    Return the candidates that satisfy the report schema, in input order.

    Parameters
    ----------
    candidates : Any
        Output of extract_candidates(); expected to be a list.
    diagnostics : DetectionDiagnostics or None
        Sink for rejected elements.

    Returns
    -------
    list[CandidateReport]
        Valid payloads, file path not yet attached.
    """
    sink = diagnostics or DetectionDiagnostics()

    if not isinstance(candidates, list):
        sink.report(UNEXPECTED_SHAPE, f"Candidates are {type(candidates).__name__}, not a list")
        return []

    accepted: List[CandidateReport] = []
    for index, candidate in enumerate(candidates):
        if not isinstance(candidate, dict):
            sink.report(
                INVALID_CANDIDATE,
                f"Element {index} is {type(candidate).__name__}, not an object",
                payload=candidate,
            )
            continue
        try:
            accepted.append(CandidateReport.model_validate(candidate))
        except ValidationError as e:
            sink.report(
                INVALID_CANDIDATE,
                f"Invalid bug report at index {index}: {_describe_errors(e)}",
                payload=candidate,
            )

    logger.debug("Accepted %d of %d candidates", len(accepted), len(candidates))
    return accepted
