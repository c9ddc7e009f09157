"""
Query references embedded in panel descriptions.

A panel points at its query files with ``query=<path>`` lines in its
free-text description. Other lines are ignored:

    CPU usage per service, see runbook.
    query=infra/nodes/graph-cpu-usage

Older panels carry a single reference for all targets, which are then
told apart by refId suffixes. Newer panels may carry one reference per
target; reference *i* belongs to target *i*. Dashboards that predate the
``query=`` syntax used the whole description as the path.
"""

from __future__ import annotations

QUERY_PREFIX = "query="


def parse_references(description: str) -> list[str]:
    """
    Extract query paths from a description, in line order.

    A line contributes a path only if splitting it on ``query=`` yields
    exactly two parts and the trimmed remainder is neither empty nor the
    literal ``query=``.

    Example:
        >>> parse_references("query=a/panel1\\nnotes\\nquery=\\nquery=a/panel2")
        ['a/panel1', 'a/panel2']
    """
    references: list[str] = []
    for line in description.split("\n"):
        parts = line.split(QUERY_PREFIX)
        if len(parts) != 2:
            continue
        path = parts[1].strip()
        if not path or path == QUERY_PREFIX:
            continue
        references.append(path)
    return references


def derive_base_path(description: str) -> str:
    """
    Return the first query reference, or the trimmed description itself.

    The fallback keeps dashboards written before ``query=`` lines existed
    working: their description was the bare path.
    """
    references = parse_references(description)
    if references:
        return references[0]
    return description.strip()


def is_invalid_description(description: str) -> bool:
    """True if the description is empty or carries no query reference."""
    if not description:
        return True
    return len(parse_references(description)) == 0


def is_valid_description(description: str) -> bool:
    """True if the description carries at least one query reference."""
    return not is_invalid_description(description)


def resolve_target_base(references: list[str], base_path: str, index: int) -> str:
    """
    Pick the base query path for the target at ``index``.

    With more than one reference, reference *i* binds to target *i*.
    Otherwise every target shares ``base_path`` and is told apart by its
    refId.
    """
    if len(references) > 1 and index < len(references):
        return references[index]
    return base_path
