"""In-document ``$ref`` resolution."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def resolve_ref(ref: str, document: dict) -> Any | None:
    """Walk a ``#/a/b/c`` pointer through the document.

    Returns the node at the pointer, or None when the reference is not
    local or any segment is missing. Never raises.
    """
    if not isinstance(ref, str) or not ref.startswith("#/"):
        logger.warning("Unsupported $ref: %r", ref)
        return None

    current: Any = document
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            logger.warning("Could not resolve $ref: %s", ref)
            return None

    return current


def deref(
    node: Any, document: dict, seen: frozenset[str] = frozenset()
) -> tuple[dict | None, frozenset[str]]:
    """Follow a chain of ``$ref`` nodes.

    ``seen`` holds the references already expanded on the current
    recursion branch. Returns the resolved node (None if unresolvable or
    cyclic) and the extended ``seen`` set.
    """
    while isinstance(node, dict) and "$ref" in node:
        ref = node["$ref"]
        if ref in seen:
            logger.warning("Cyclic $ref not expanded: %s", ref)
            return None, seen
        seen = seen | {ref}
        node = resolve_ref(ref, document)

    if not isinstance(node, dict):
        return None, seen
    return node, seen
