"""
JSON Decoder
============
Parses the fence-stripped reply and normalises it to a candidate list.

Supported shapes:
    [ {...}, {...} ]                                  bare array of candidates
    {"analysis": "...", "bugReports": [ {...} ]}      the shape the prompt asks for

An object without "bugReports" (or with "bugReports": null) means no
findings. "analysis" is informational and never becomes a finding.
"""
import json
from typing import Any, List, Optional, Tuple

from app.core.constants import ANALYSIS_KEY, REPORTS_KEY
from app.detector.errors import MalformedPayloadError, UnexpectedShapeError


def decode_reply(text: str) -> Any:
    """
    Parse text as a generic JSON value.

    Raises
    ------
    MalformedPayloadError
        The text is not valid JSON.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError, RecursionError) as e:
        raise MalformedPayloadError(f"Response is not valid JSON: {e}") from e


def extract_candidates(decoded: Any) -> Tuple[List[Any], Optional[Any]]:
    """
    Pull the candidate array (and the optional analysis text) out of a decoded reply.

    Returns
    -------
    tuple
        (candidates, analysis). Candidates are still unvalidated.

    Raises
    ------
    UnexpectedShapeError
        Valid JSON that is neither an array nor an object carrying one.
    """
    if isinstance(decoded, list):
        return decoded, None

    if isinstance(decoded, dict):
        analysis = decoded.get(ANALYSIS_KEY)
        reports = decoded.get(REPORTS_KEY)
        if reports is None:
            return [], analysis
        if isinstance(reports, list):
            return reports, analysis
        raise UnexpectedShapeError(
            f"'{REPORTS_KEY}' is {type(reports).__name__}, expected an array"
        )

    raise UnexpectedShapeError(
        f"Expected a JSON array or object, got {type(decoded).__name__}"
    )
