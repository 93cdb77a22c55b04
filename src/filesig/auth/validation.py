"""Email domain allow-list for signer identities."""

from __future__ import annotations

import re
from collections.abc import Iterable

_SPLIT_RE = re.compile(r"[,\s]+")


def parse_allowed_domains(raw: str | None) -> list[str]:
    """Split a comma/whitespace separated domain list; lower-cased, blanks dropped."""
    if not raw:
        return []
    return [d.lower() for d in _SPLIT_RE.split(raw.strip()) if d]


def is_allowed_email(email: str | None, allowed_domains: Iterable[str] = ()) -> bool:
    """True if ``email`` belongs to one of ``allowed_domains``.

    An empty allow-list admits every non-empty email.
    """
    if not email:
        return False
    domains = {d.strip().lower() for d in allowed_domains if d.strip()}
    if not domains:
        return True
    _, sep, domain = email.rpartition("@")
    if not sep or not domain:
        return False
    return domain.lower() in domains
