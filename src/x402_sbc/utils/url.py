"""
URL helpers
"""

import re

_LOCALHOST_RE = re.compile(r"^(https?://)localhost([:/]|$)", re.IGNORECASE)


def normalize_localhost(url: str) -> str:
    """Rewrite a localhost host to 127.0.0.1 so it never depends on resolver behaviour."""
    return _LOCALHOST_RE.sub(r"\g<1>127.0.0.1\g<2>", url, count=1)
