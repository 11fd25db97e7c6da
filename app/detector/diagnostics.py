"""
Detection Diagnostics
=====================
Per-call sink for non-fatal pipeline anomalies.

Anomalies (unexpected envelope, decode failure, rejected candidate, ...) are
always recorded on the sink and logged as warnings. Trace output — the raw
reply, the model's free-text analysis — is only emitted when the call was
made with debug=True; otherwise trace() is a no-op.

The sink never affects what the pipeline returns.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

logger = logging.getLogger("app.detector")

# Raw replies can be whole files; keep log lines bounded
_MAX_LOGGED_CHARS = 2000


@dataclass
class Anomaly:
    """One non-fatal problem seen while parsing a reply."""
    kind: str
    detail: str


@dataclass
class DetectionDiagnostics:
    debug: bool = False
    file_path: str = ""
    anomalies: List[Anomaly] = field(default_factory=list)
    log: logging.Logger = logger

    def trace(self, msg: str, *args: Any) -> None:
        if self.debug:
            self.log.info("[%s] " + msg, self.file_path, *args)

    def report(self, kind: str, detail: str, payload: Optional[Any] = None) -> None:
        self.anomalies.append(Anomaly(kind=kind, detail=detail))
        self.log.warning("[%s] %s: %s", self.file_path, kind, detail)
        if self.debug and payload is not None:
            self.trace("Offending value: %s", truncate_for_log(repr(payload)))

    def count(self, kind: str) -> int:
        return sum(1 for a in self.anomalies if a.kind == kind)


def truncate_for_log(text: str) -> str:
    if len(text) <= _MAX_LOGGED_CHARS:
        return text
    return text[:_MAX_LOGGED_CHARS] + f"... ({len(text) - _MAX_LOGGED_CHARS} more chars)"
