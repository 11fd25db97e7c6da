"""
LLM Prompts
===========
Centralised store for the bug detection system and user prompts.

Prompt Design Rules:
    - Review the changed code AND how it interacts with the rest of the file
    - Report only bugs that cause runtime issues or incorrect behaviour
    - suggestedFix holds replacement code only — no "Change X to Y" prose
    - Reply with a single JSON object, no markdown, no commentary

Diff Cleanup:
    - The diff loader separates hunk sections with ---new_hunk--- and
      ---old_hunk--- sentinel lines; these are removed before the diff
      is placed in the prompt
"""
import logging

from app.core.constants import NEW_HUNK_MARKER, OLD_HUNK_MARKER

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# System Prompt
# ---------------------------------------------------------------------------
SYSTEM_PROMPT = (
    "You are a highly skilled code reviewer focused on detecting potential "
    "bugs and issues. You answer with valid JSON only."
)


# ---------------------------------------------------------------------------
# Response Format
# ---------------------------------------------------------------------------
RESPONSE_FORMAT = """{
  "analysis": "Your detailed analysis of the code and explanation of any issues found",
  "bugReports": [
    {
      "description": "Detailed explanation of why this could cause problems",
      "confidence": <number 0-100>,
      "severity": "low" | "medium" | "high" | "critical",
      "suggestedFix": "The exact code that should replace the problematic lines, with proper indentation preserved",
      "lineStart": <line number>,
      "lineEnd": <line number>
    }
  ]
}"""


def clean_patch(patch: str) -> str:
    """Remove hunk sentinel lines from a diff and trim it."""
    return patch.replace(NEW_HUNK_MARKER, "").replace(OLD_HUNK_MARKER, "").strip()


# ---------------------------------------------------------------------------
# User Prompt Builder
# ---------------------------------------------------------------------------
def build_bug_detection_prompt(file_path: str, file_content: str, patch: str) -> str:
    """
    Build the bug detection prompt for one changed file.

    Parameters
    ----------
    file_path : str
        Path of the file under review, as shown to the model.
    file_content : str
        Full content of the file after the change.
    patch : str
        Unified diff of the change; hunk sentinels are stripped here.

    Returns
    -------
    str
        Complete prompt string.
    """
    cleaned_patch = clean_patch(patch)
    logger.debug(
        "Building bug detection prompt for %s (diff %d chars, file %d chars)",
        file_path, len(cleaned_patch), len(file_content),
    )

    sections = [
        "You are a highly skilled code reviewer focused on detecting potential "
        "bugs and issues. Your task is to thoroughly analyze the code for any "
        "bugs, issues, or problematic patterns that could cause problems.",
        "",
        "Input: Code changes and their context",
        "Task: Review for bugs, including:",
        "1. Issues in the changed code itself",
        "2. Problems with how the changed code interacts with existing code",
        "3. Issues with function calls, even if the function definition isn't visible",
        "4. Potential runtime issues based on how the code is used",
        "",
        "Code to analyze:",
        f"File: {file_path}",
        "",
        "Changes made (diff):",
        "```diff",
        cleaned_patch,
        "```",
        "",
        "Full file context:",
        "```",
        file_content,
        "```",
        "",
        "Respond with a JSON object in this exact format:",
        RESPONSE_FORMAT,
        "",
        "Important:",
        "- Focus on actual bugs that will cause runtime issues or incorrect behavior",
        "- For each bug, provide the exact code that should replace the problematic lines",
        "- Preserve the exact indentation and code style when suggesting fixes",
        "- The fix should only include the specific lines that need to change",
        '- Do not include natural language instructions in the suggestedFix (no "Change X to Y" or "Remove Z")',
        "- If no bugs are found, provide your analysis explaining why and return an empty bugReports array",
        "",
        "IMPORTANT: Return ONLY valid JSON. No other text, no markdown, no code blocks.",
    ]
    return "\n".join(sections)
