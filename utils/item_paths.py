"""
Item path helpers for JSON records.

Paths are slash-separated segments, each optionally qualified with a
namespace prefix: "attributes/ri:mail", "extension/ext:costCenter".
Prefixes carry no meaning for JSON records and are ignored on lookup.
"""

from typing import Any


PATH_SEPARATOR = "/"


def parse_path(path: str) -> list[str]:
    """
    Split a path into its raw segments.

    Examples:
        "attributes/ri:mail" → ["attributes", "ri:mail"]
        "/name/"             → ["name"]
    """
    return [segment.strip() for segment in path.split(PATH_SEPARATOR) if segment.strip()]


def local_name(segment: str) -> str:
    """Drop a namespace prefix: "ri:mail" → "mail"."""
    return segment.rsplit(":", 1)[-1]


def last_name(path: str) -> str:
    """Local name of the last segment, or "" for an empty path."""
    segments = parse_path(path)
    return local_name(segments[-1]) if segments else ""


def rest(path: str) -> str:
    """Path without its first segment: "attributes/ri:mail" → "ri:mail"."""
    return PATH_SEPARATOR.join(parse_path(path)[1:])


def strip_prefixes(path: str) -> str:
    """Path with namespace prefixes removed: "extension/ext:costCenter" → "extension/costCenter"."""
    return PATH_SEPARATOR.join(local_name(segment) for segment in parse_path(path))


def get_real_values(record: dict, path: str) -> tuple:
    """
    Return the real values found at path, or an empty tuple when missing.

    Lists met before the last segment are traversed element-wise.
    A list at the end contributes its elements (nulls included);
    a scalar contributes itself; a null or missing key contributes nothing.
    """
    segments = parse_path(path)
    if not segments:
        return ()

    current: list[Any] = [record]
    for segment in segments:
        found: list[Any] = []
        for node in current:
            if not isinstance(node, dict):
                continue
            value = _lookup(node, segment)
            if value is None:
                continue
            if isinstance(value, list):
                found.extend(value)
            else:
                found.append(value)
        current = found
    return tuple(current)


def _lookup(node: dict, segment: str) -> Any:
    name = local_name(segment)
    if name in node:
        return node[name]
    # Keys stored with their prefix, e.g. {"ri:mail": [...]}
    return node.get(segment)
