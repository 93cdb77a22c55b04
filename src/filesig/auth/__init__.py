"""Signer identity policy helpers. Authentication itself happens upstream."""

from filesig.auth.validation import is_allowed_email, parse_allowed_domains

__all__ = ["is_allowed_email", "parse_allowed_domains"]
