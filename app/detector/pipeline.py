"""
Response Parsing Pipeline
=========================
The synchronous, I/O-free half of bug detection:

    raw reply → unwrap envelope → strip fences → decode JSON
              → extract candidates → validate → assemble

Any failure signal (empty reply, unknown envelope, malformed JSON, wrong
shape) ends the run with an empty list. Invalid candidates are dropped one
by one. Nothing raised by a stage escapes this function.
"""
from typing import Any, List, Optional

from app.detector.assembler import assemble_findings
from app.detector.decoder import decode_reply, extract_candidates
from app.detector.diagnostics import DetectionDiagnostics, truncate_for_log
from app.detector.envelope import unwrap_reply
from app.detector.errors import DetectionError
from app.detector.fences import strip_fences
from app.detector.validator import validate_candidates
from app.models.bug_report import BugReport


def parse_bug_reports(
    raw: Any,
    file_path: str,
    diagnostics: Optional[DetectionDiagnostics] = None,
) -> List[BugReport]:
    """
    Turn a gateway reply into validated BugReports for file_path.

    Parameters
    ----------
    raw : Any
        Whatever the gateway returned: text or an envelope object.
    file_path : str
        File under review; stamped on every finding.
    diagnostics : DetectionDiagnostics or None
        Optional anomaly sink. Has no effect on the result.

    Returns
    -------
    list[BugReport]
        Possibly empty, never None.
    """
    sink = diagnostics or DetectionDiagnostics(file_path=file_path)
    if sink.debug:
        sink.trace("Raw bot response: %s", truncate_for_log(repr(raw)))

    try:
        text = unwrap_reply(raw)
        decoded = decode_reply(strip_fences(text))
        candidates, analysis = extract_candidates(decoded)
    except DetectionError as e:
        sink.report(e.kind, str(e), payload=raw)
        return []

    if sink.debug and analysis is not None:
        sink.trace("Analysis: %s", truncate_for_log(str(analysis)))

    if not candidates:
        sink.trace("No bug reports in reply")
        return []

    return assemble_findings(validate_candidates(candidates, sink), file_path)
