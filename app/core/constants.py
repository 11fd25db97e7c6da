"""
Constants
=========
Centralised storage for confidence bounds, diff sentinels and reply keys.
"""
CONFIDENCE_MIN = 0
CONFIDENCE_MAX = 100

# Sentinel lines the diff loader inserts between hunk sections
NEW_HUNK_MARKER = "---new_hunk---\n"
OLD_HUNK_MARKER = "---old_hunk---\n"

# Keys of the decoded reply object
REPORTS_KEY = "bugReports"
ANALYSIS_KEY = "analysis"
