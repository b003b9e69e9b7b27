"""Locale tags as they travel through backup payloads.

Backups carry the device locale as the bytes of a BCP-47 tag (``en-US``).
Older backups used ``ll_CC``; both forms are accepted on restore.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LocaleConfiguration:
    """Snapshot of the live locale configuration.

    ``user_set`` marks a locale the user picked explicitly. Automatic locale
    negotiation (network, SIM) must not overwrite it, and neither does a
    restore.
    """

    locale: str | None = None
    user_set: bool = False


def normalize_locale_tag(data: bytes | str) -> str:
    """Decode a backed-up locale and convert legacy ``ll_CC`` to ``ll-CC``."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return data.strip().replace("_", "-")


def encode_locale(language: str, country: str | None = None) -> bytes:
    """Encode a language/country pair the way backups store it."""
    tag = language
    if country:
        tag += "-" + country
    return tag.encode("utf-8")


def split_locale_tag(tag: str) -> tuple[str, str | None]:
    """Split a tag into language and region (``None`` if absent).

    The region is the first subtag that is two letters or three digits, so
    script subtags (``zh-Hant-TW``) are skipped.
    """
    language, *subtags = normalize_locale_tag(tag).split("-")
    for subtag in subtags:
        if (len(subtag) == 2 and subtag.isalpha()) or (len(subtag) == 3 and subtag.isdigit()):
            return language, subtag
    return language, None


__all__ = ["LocaleConfiguration", "normalize_locale_tag", "encode_locale", "split_locale_tag"]
