"""
Free-text cleanup for user supplied names, notes and reasons.
"""
from typing import Optional

import bleach


def clean_text(value: Optional[str]) -> str:
    """Trim ``value`` and strip every HTML tag and attribute from it."""
    return bleach.clean((value or '').strip(), tags=set(), attributes={}, strip=True)
