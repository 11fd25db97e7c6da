"""
Detection Errors
================
Standardised failure kinds for the bug detection pipeline.

Every kind is recovered inside the pipeline: the stage that detects it
raises the matching DetectionError subclass and BugDetector /
parse_bug_reports catch it at the boundary, returning an empty list.
INVALID_CANDIDATE is the exception to the raising rule — a single bad
element is dropped and reported, its siblings are kept.
"""


# ---------------------------------------------------------------------------
# Issue Kind Constants
# ---------------------------------------------------------------------------
EMPTY_REPLY = "EMPTY_REPLY"
UNRECOGNIZED_ENVELOPE = "UNRECOGNIZED_ENVELOPE"
MALFORMED_PAYLOAD = "MALFORMED_PAYLOAD"
UNEXPECTED_SHAPE = "UNEXPECTED_SHAPE"
INVALID_CANDIDATE = "INVALID_CANDIDATE"
GATEWAY_FAILURE = "GATEWAY_FAILURE"

ALL_ISSUE_KINDS = frozenset({
    EMPTY_REPLY,
    UNRECOGNIZED_ENVELOPE,
    MALFORMED_PAYLOAD,
    UNEXPECTED_SHAPE,
    INVALID_CANDIDATE,
    GATEWAY_FAILURE,
})


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------
class DetectionError(Exception):
    """Base class for pipeline failures that resolve to an empty result."""
    kind = ""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)


class EmptyReplyError(DetectionError):
    kind = EMPTY_REPLY


class UnrecognizedEnvelopeError(DetectionError):
    kind = UNRECOGNIZED_ENVELOPE


class MalformedPayloadError(DetectionError):
    kind = MALFORMED_PAYLOAD


class UnexpectedShapeError(DetectionError):
    kind = UNEXPECTED_SHAPE


class GatewayFailureError(DetectionError):
    kind = GATEWAY_FAILURE
