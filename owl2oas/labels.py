"""Human readable names for ontology resources."""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

_KEY_INVALID_RE = re.compile(r"[^A-Za-z0-9._-]")


def local_name(identifier: object) -> str:
    """Trailing fragment or path component of an IRI."""

    text = str(identifier).rstrip("#/")
    for separator in ("#", "/", ":"):
        if separator in text:
            candidate = text.rsplit(separator, 1)[1]
            if candidate:
                return candidate
    return text


def pick_literal(
    identifier: object,
    literals: Iterable[Tuple[Optional[str], str]],
    language: Optional[str] = None,
) -> Optional[str]:
    """Literal tagged with exactly ``language``, else an untagged one, else None.

    Language tags compare case-insensitively. Several candidates for the same
    tag resolve to the lexicographically smallest value.
    """

    wanted = language.lower() if language else None
    tagged = []
    untagged = []
    for tag, value in literals:
        if tag is None:
            untagged.append(value)
        elif wanted is not None and tag.lower() == wanted:
            tagged.append(value)

    for candidates, tag in ((tagged, language), (untagged, None)):
        if not candidates:
            continue
        if len(set(candidates)) > 1:
            chosen = min(candidates)
            logger.warning(
                "Resource <%s> has %d labels for language %r; using '%s'",
                identifier,
                len(set(candidates)),
                tag,
                chosen,
            )
            return chosen
        return candidates[0]
    return None


def resolve_label(
    identifier: object,
    labels: Iterable[Tuple[Optional[str], str]],
    language: Optional[str] = None,
) -> str:
    """Label to show for ``identifier``, falling back to the IRI's local name."""

    label = pick_literal(identifier, labels, language)
    return label if label is not None else local_name(identifier)


def label_key(label: str) -> str:
    """Convert a label into a name usable as component key and path segment."""

    slug = _KEY_INVALID_RE.sub("_", label.strip())
    slug = re.sub(r"_+", "_", slug)
    return slug.strip("_") or "Resource"
