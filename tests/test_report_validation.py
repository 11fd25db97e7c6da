"""
Report Validation Tests
=======================
Per-candidate schema checks, the BugReport model, and file path stamping.

Covers:
    - Valid candidates accepted with fields unchanged
    - Confidence range and type
    - Severity set membership (exact match)
    - Line range ordering and integrality
    - One bad element never drops its siblings
    - Non-list input yields nothing
    - Assembler overrides any model-guessed file path
"""
import pytest
from pydantic import ValidationError

from app.detector.assembler import assemble_findings
from app.detector.diagnostics import DetectionDiagnostics
from app.detector.errors import INVALID_CANDIDATE, UNEXPECTED_SHAPE
from app.detector.validator import validate_candidates
from app.models.bug_report import BugReport, CandidateReport


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _candidate(**overrides) -> dict:
    """Create a well-formed raw candidate, with optional field overrides."""
    data = {
        "description": "Index can run past the end of the list",
        "confidence": 80,
        "severity": "high",
        "suggestedFix": "for i in range(len(items)):",
        "lineStart": 5,
        "lineEnd": 7,
    }
    data.update(overrides)
    return data


def _without(field: str) -> dict:
    data = _candidate()
    del data[field]
    return data


# ---------------------------------------------------------------------------
# 1. Valid Candidates
# ---------------------------------------------------------------------------
class TestValidCandidates:

    def test_valid_candidate_accepted(self):
        [report] = validate_candidates([_candidate()])

        assert isinstance(report, CandidateReport)
        assert report.description == "Index can run past the end of the list"
        assert report.confidence == 80
        assert report.severity == "high"
        assert report.suggested_fix == "for i in range(len(items)):"
        assert report.line_start == 5
        assert report.line_end == 7

    def test_empty_suggested_fix_allowed(self):
        assert len(validate_candidates([_candidate(suggestedFix="")])) == 1

    @pytest.mark.parametrize("confidence", [0, 100, 55.5])
    def test_confidence_bounds_inclusive(self, confidence):
        [report] = validate_candidates([_candidate(confidence=confidence)])
        assert report.confidence == confidence

    def test_integer_confidence_stays_integer(self):
        [report] = validate_candidates([_candidate(confidence=80)])
        assert isinstance(report.confidence, int)

    @pytest.mark.parametrize("severity", ["low", "medium", "high", "critical"])
    def test_all_severities(self, severity):
        assert len(validate_candidates([_candidate(severity=severity)])) == 1

    def test_single_line_range(self):
        assert len(validate_candidates([_candidate(lineStart=9, lineEnd=9)])) == 1

    def test_whole_float_line_numbers_become_int(self):
        [report] = validate_candidates([_candidate(lineStart=5.0, lineEnd=6.0)])
        assert report.line_start == 5 and isinstance(report.line_start, int)
        assert report.line_end == 6

    def test_extra_keys_ignored(self):
        [report] = validate_candidates([_candidate(category="logic", filePath="guess.py")])
        assert not hasattr(report, "file_path")

    def test_order_preserved(self):
        reports = validate_candidates([
            _candidate(description="first"),
            _candidate(description="second"),
            _candidate(description="third"),
        ])
        assert [r.description for r in reports] == ["first", "second", "third"]


# ---------------------------------------------------------------------------
# 2. Invalid Candidates
# ---------------------------------------------------------------------------
class TestInvalidCandidates:

    @pytest.mark.parametrize("candidate", [
        _candidate(confidence=101),
        _candidate(confidence=-1),
        _candidate(confidence=float("nan")),
        _candidate(confidence="80"),
        _candidate(confidence=True),
        _candidate(confidence=None),
        _candidate(severity="High"),
        _candidate(severity="urgent"),
        _candidate(severity=""),
        _candidate(lineStart=8, lineEnd=7),
        _candidate(lineStart="5"),
        _candidate(lineEnd=7.5),
        _candidate(lineStart=False, lineEnd=1),
        _candidate(description=42),
        _candidate(description="   "),
        _candidate(suggestedFix=None),
        _candidate(suggestedFix=["line 1"]),
        _without("description"),
        _without("confidence"),
        _without("severity"),
        _without("suggestedFix"),
        _without("lineStart"),
        _without("lineEnd"),
    ])
    def test_rejected(self, candidate):
        assert validate_candidates([candidate]) == []

    def test_invalid_sibling_does_not_drop_valid_ones(self):
        candidates = [
            _candidate(description="keep me"),
            _candidate(confidence=150),
            _candidate(description="keep me too", severity="low"),
            _candidate(lineStart=10, lineEnd=2),
        ]
        reports = validate_candidates(candidates)
        assert [r.description for r in reports] == ["keep me", "keep me too"]

    @pytest.mark.parametrize("element", ["a string", 42, None, ["nested"]])
    def test_non_object_element_rejected(self, element):
        reports = validate_candidates([element, _candidate()])
        assert len(reports) == 1

    def test_rejections_reported_to_sink(self):
        sink = DetectionDiagnostics()
        validate_candidates([_candidate(), _candidate(severity="bad"), "junk"], sink)
        assert sink.count(INVALID_CANDIDATE) == 2

    @pytest.mark.parametrize("candidates", [{"bugReports": []}, "[]", None, 3])
    def test_non_list_input_yields_nothing(self, candidates):
        sink = DetectionDiagnostics()
        assert validate_candidates(candidates, sink) == []
        assert sink.count(UNEXPECTED_SHAPE) == 1

    def test_works_without_sink(self):
        assert validate_candidates([_candidate(confidence=999)]) == []


# ---------------------------------------------------------------------------
# 3. BugReport Model
# ---------------------------------------------------------------------------
class TestBugReportModel:

    def test_frozen(self):
        [report] = assemble_findings(validate_candidates([_candidate()]), "a.py")
        with pytest.raises(ValidationError):
            report.severity = "low"

    def test_wire_names(self):
        [report] = assemble_findings(validate_candidates([_candidate()]), "a.py")
        dumped = report.model_dump(by_alias=True)
        assert dumped == {**_candidate(), "filePath": "a.py"}

    def test_direct_construction_enforces_line_order(self):
        with pytest.raises(ValidationError):
            BugReport(
                description="d", confidence=1, severity="low", suggested_fix="",
                line_start=3, line_end=1, file_path="a.py",
            )


# ---------------------------------------------------------------------------
# 4. Finding Assembler
# ---------------------------------------------------------------------------
class TestFindingAssembler:

    def test_file_path_stamped_on_every_finding(self):
        payloads = validate_candidates([_candidate(), _candidate(lineStart=1, lineEnd=1)])
        findings = assemble_findings(payloads, "src/a.ts")

        assert len(findings) == 2
        assert all(isinstance(f, BugReport) for f in findings)
        assert all(f.file_path == "src/a.ts" for f in findings)

    def test_model_guess_overridden(self):
        payloads = validate_candidates([_candidate(filePath="wrong/guess.ts")])
        [finding] = assemble_findings(payloads, "src/a.ts")
        assert finding.file_path == "src/a.ts"

    def test_other_fields_unchanged(self):
        [payload] = validate_candidates([_candidate()])
        [finding] = assemble_findings([payload], "a.py")
        assert finding.model_dump(exclude={"file_path"}) == payload.model_dump()

    def test_empty_input(self):
        assert assemble_findings([], "a.py") == []
