"""
Bug Detector
============
Asks a chat model to find bugs in one changed file and returns the
validated findings.

Flow:
    1. Build the prompt (file path, cleaned diff, full file)
    2. One gateway call (provider fallback lives inside the client)
    3. Parse the reply: unwrap → strip fences → decode → validate → assemble

Failure Policy:
    - Gateway errors, timeouts and cancellation resolve to []
    - Reply parsing failures resolve to []
    - A single invalid finding is dropped, the rest are kept
    - The caller never sees an exception from detect()

Concurrency:
    - detect() holds no state between calls; detect_many() runs one
      pipeline per file concurrently and returns results in input order

The BugDetector does NOT:
    - Rank, deduplicate or render findings
    - Discover related files or walk imports
    - Retry the gateway call (that's the client's job)
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from app.core.config import DEBUG_DEFAULT, DETECTION_TIMEOUT_SECONDS
from app.detector.diagnostics import DetectionDiagnostics
from app.detector.errors import GatewayFailureError
from app.detector.pipeline import parse_bug_reports
from app.llm.client import ChatOptions, ChatReply, LLMClient
from app.llm.prompts import build_bug_detection_prompt
from app.llm.router import LLMRouter
from app.models.bug_report import BugReport
from app.models.file_change import FileChange

logger = logging.getLogger(__name__)


class BugDetector:
    """
    Detects bugs in changed files using an LLM.

    Parameters
    ----------
    client : LLMClient or None
        Chat gateway (auto-created if not provided).
    router : LLMRouter or None
        Provider router (auto-created if not provided).
    options : ChatOptions or None
        Generation settings for every call.
    debug : bool
        Default trace flag for calls that don't bring their own diagnostics.
    timeout_seconds : float
        Ceiling for one file's gateway call, provider fallback included.
    """

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        router: Optional[LLMRouter] = None,
        options: Optional[ChatOptions] = None,
        debug: bool = DEBUG_DEFAULT,
        timeout_seconds: float = DETECTION_TIMEOUT_SECONDS,
    ) -> None:
        self.client = client or LLMClient()
        self.router = router or LLMRouter()
        self.options = options or ChatOptions()
        self.debug = debug
        self.timeout_seconds = timeout_seconds

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    async def detect(
        self,
        file_path: str,
        file_content: str,
        patch: str,
        diagnostics: Optional[DetectionDiagnostics] = None,
    ) -> List[BugReport]:
        """
        Find bugs in one changed file.

        Parameters
        ----------
        file_path : str
            Path of the file under review.
        file_content : str
            Full content of the file.
        patch : str
            Diff of the change.
        diagnostics : DetectionDiagnostics or None
            Anomaly sink for this call; carries the debug flag.

        Returns
        -------
        list[BugReport]
            Validated findings, possibly empty.
        """
        sink = diagnostics or DetectionDiagnostics(debug=self.debug, file_path=file_path)
        try:
            prompt = build_bug_detection_prompt(file_path, file_content, patch)

            try:
                reply = await self._ask_gateway(prompt)
            except GatewayFailureError as e:
                sink.report(e.kind, str(e))
                return []

            sink.trace("Reply from provider %s", reply.provider_name)
            findings = parse_bug_reports(reply.content, file_path, sink)
        except Exception:
            logger.exception("Error during bug detection for %s", file_path)
            return []

        logger.info("Bug detector found %d issue(s) in %s", len(findings), file_path)
        return findings

    async def _ask_gateway(self, prompt: str) -> ChatReply:
        """One bounded gateway call; every way it can fail becomes GatewayFailureError."""
        try:
            return await asyncio.wait_for(
                self.client.chat_with_fallback(prompt, self.options, self.router),
                timeout=self.timeout_seconds,
            )
        except asyncio.CancelledError as e:
            raise GatewayFailureError("Gateway call cancelled") from e
        except asyncio.TimeoutError as e:
            raise GatewayFailureError(
                f"Gateway call timed out after {self.timeout_seconds:.0f}s"
            ) from e
        except Exception as e:
            raise GatewayFailureError(f"Gateway call failed: {e}") from e

    async def detect_many(
        self,
        files: Sequence[FileChange],
        diagnostics: Optional[Sequence[DetectionDiagnostics]] = None,
    ) -> List[List[BugReport]]:
        """
        Run detect() for every file concurrently; results follow input order.

        diagnostics, when given, holds one sink per file in the same order.
        """
        if diagnostics is None:
            sinks = [
                DetectionDiagnostics(debug=self.debug, file_path=f.file_path)
                for f in files
            ]
        else:
            sinks = list(diagnostics)
        if len(sinks) != len(files):
            raise ValueError(f"Expected {len(files)} diagnostics sinks, got {len(sinks)}")

        return list(await asyncio.gather(*(
            self.detect(f.file_path, f.file_content, f.patch, sink)
            for f, sink in zip(files, sinks)
        )))
