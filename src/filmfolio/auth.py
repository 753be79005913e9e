"""Shared-passphrase gate for the admin surface.

This keeps casual visitors out of the editor for non-sensitive marketing
content.  It is not access control: there are no accounts, no sessions
and no rate limiting.
"""

from __future__ import annotations

import hmac


def check_passphrase(candidate: str | None, expected: str) -> bool:
    """Return True if ``candidate`` matches the configured passphrase.

    An empty ``expected`` passphrase never matches, which keeps the admin
    surface locked until one is configured.
    """
    if not expected or candidate is None:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))
