"""Heuristic detection of search term types (uuid, email, url, domain)."""

from __future__ import annotations

from typing import Iterable

from cliscore.models import TypeTag

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_UUID_GROUPS = (8, 4, 4, 4, 12)


def is_uuid(term: str) -> bool:
    """Return True for an 8-4-4-4-12 hexadecimal UUID."""
    if len(term) != 36:
        return False
    parts = term.split("-")
    if tuple(len(p) for p in parts) != _UUID_GROUPS:
        return False
    return all(c in _HEX_DIGITS for part in parts for c in part)


def is_email(term: str) -> bool:
    return (
        "@" in term
        and "." in term
        and not term.startswith(("@", "."))
        and not term.endswith(("@", "."))
    )


def is_url(term: str) -> bool:
    """Return True when ``://`` occurs exactly once, e.g. ``scheme://rest``."""
    return term.count("://") == 1


def is_domain(term: str) -> bool:
    # Must contain a dot but not be an email or URL
    return (
        "." in term
        and not is_email(term)
        and not is_url(term)
        and not term.startswith(".")
        and not term.endswith(".")
        and "://" not in term
    )


def detect_types(terms: Iterable[str]) -> set[str]:
    """Return the set of type tags represented anywhere in *terms*.

    A UUID term contributes only ``uuid``; other terms are checked
    independently for email, url and domain. Unrecognised terms add nothing.
    """
    types: set[str] = set()
    for term in terms:
        if is_uuid(term):
            types.add(TypeTag.UUID.value)
            continue
        if is_email(term):
            types.add(TypeTag.EMAIL.value)
        if is_url(term):
            types.add(TypeTag.URL.value)
        if is_domain(term):
            types.add(TypeTag.DOMAIN.value)
    return types
