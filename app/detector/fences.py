"""
Fence Stripper
==============
Removes markdown code-fence decoration around a model reply.

At most one opening fence (optionally tagged, e.g. ```json) and at most one
closing fence are removed, then whitespace is trimmed. The payload itself
is left untouched — broken JSON stays broken.
"""
import re

# Opening fence with an optional language tag; the newline may be missing
# when the model puts the payload on the fence line.
_OPENING_FENCE_RE = re.compile(r"\A```[\w+.-]*[ \t]*\r?\n?")
_CLOSING_FENCE_RE = re.compile(r"```\Z")


def strip_fences(text: str) -> str:
    """
    Strip one leading and one trailing code fence.

    Idempotent for any payload that does not itself begin or end with a
    fence marker, which holds for every JSON document.
    """
    cleaned = text.strip()
    cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE_RE.sub("", cleaned.rstrip(), count=1)
    return cleaned.strip()
