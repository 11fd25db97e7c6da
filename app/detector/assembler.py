"""
Finding Assembler
=================
Turns validated payloads into BugReports for one file.

The file path always comes from the caller; a path the model guessed was
already discarded by the validator and is never consulted here.
"""
from typing import Iterable, List

from app.models.bug_report import BugReport, CandidateReport


def assemble_findings(candidates: Iterable[CandidateReport], file_path: str) -> List[BugReport]:
    """Stamp file_path on every payload, preserving order."""
    return [
        BugReport(**candidate.model_dump(), file_path=file_path)
        for candidate in candidates
    ]
