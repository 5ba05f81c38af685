"""Helpers to read and write values inside decoded JSON trees (dicts, lists and scalars)."""

from typing import Any

from couch_docs.documents.errors import ExtractionError

PathSegment = str | int


def _format_path(path: tuple) -> str:
    return "".join(f"[{seg!r}]" for seg in path) or "<root>"


def _is_index(segment: PathSegment) -> bool:
    # bool is a subclass of int but never a valid array index
    return isinstance(segment, int) and not isinstance(segment, bool)


def get_path(value: Any, *segments: PathSegment) -> Any:
    """
    Reads the value found at the given path.

    A missing object key yields None, as does a key or index applied to a value of the wrong kind.
    An index outside the bounds of an array raises IndexError.

    Args:
        value (Any): The decoded JSON value to read from.
        *segments (str | int): Object keys and/or array indexes.

    Returns:
        Any: The value at the path, or None.

    Raises:
        IndexError: If an array index is out of range.
    """
    current = value
    for pos, segment in enumerate(segments):
        if _is_index(segment):
            if not isinstance(current, list):
                return None
            if segment < 0 or segment >= len(current):
                raise IndexError(
                    f"Index {segment} out of range for array of length {len(current)} at {_format_path(segments[:pos])}"
                )
            current = current[segment]
        elif isinstance(segment, str):
            if not isinstance(current, dict):
                return None
            current = current.get(segment)
        else:
            raise TypeError(f"Unsupported path segment type: {type(segment).__name__}")
    return current


def set_path(value: Any, segments: tuple | list, new_value: Any) -> Any:
    """
    Writes new_value at the given path, creating missing object keys on the way.

    A None found where an object is needed is replaced by an empty object, so a path below a
    null field can be written. The root itself must already be a container.

    Args:
        value (Any): The decoded JSON value to modify in place.
        segments (tuple | list): Object keys and/or array indexes. Must not be empty.
        new_value (Any): The value to store.

    Returns:
        Any: The (modified) root value.

    Raises:
        IndexError: If an array index is out of range.
        TypeError: If a key or index is applied to a value that cannot hold it.
    """
    segments = tuple(segments)
    if not segments:
        raise ValueError("Cannot set a value at an empty path")

    current = value
    for pos, segment in enumerate(segments):
        last = pos == len(segments) - 1
        if _is_index(segment):
            if not isinstance(current, list):
                raise TypeError(f"Cannot index a non-array with {segment} at {_format_path(segments[:pos])}")
            if segment < 0 or segment >= len(current):
                raise IndexError(
                    f"Index {segment} out of range for array of length {len(current)} at {_format_path(segments[:pos])}"
                )
            if last:
                current[segment] = new_value
                break
            nxt = current[segment]
            if nxt is None and isinstance(segments[pos + 1], str):
                nxt = current[segment] = {}
            current = nxt
        elif isinstance(segment, str):
            if not isinstance(current, dict):
                raise TypeError(f"Cannot set key '{segment}' on a non-object at {_format_path(segments[:pos])}")
            if last:
                current[segment] = new_value
                break
            nxt = current.get(segment)
            if nxt is None and isinstance(segments[pos + 1], str):
                nxt = current[segment] = {}
            current = nxt
        else:
            raise TypeError(f"Unsupported path segment type: {type(segment).__name__}")
    return value


def extract(value: Any, *path: PathSegment, expected: type | tuple = str, optional: bool = False) -> Any:
    """
    Extracts a typed value from a JSON tree.

    Args:
        value (Any): The decoded JSON value.
        *path (str | int): Path to the member.
        expected (type | tuple): Accepted python type(s) of the member.
        optional (bool): If True, a missing or null member yields None instead of failing.

    Returns:
        Any: The member value.

    Raises:
        ExtractionError: If the member is missing (and not optional) or of the wrong type.
    """
    try:
        found = get_path(value, *path)
    except IndexError as e:
        raise ExtractionError(f"Cannot extract {_format_path(path)}: {e}", path=path) from e

    if found is None:
        if optional:
            return None
        raise ExtractionError(f"Missing required field {_format_path(path)}", path=path)

    # JSON booleans must not satisfy an int expectation
    if isinstance(found, bool) and bool not in (expected if isinstance(expected, tuple) else (expected,)):
        raise ExtractionError(f"Field {_format_path(path)} has type bool", path=path)
    if not isinstance(found, expected):
        raise ExtractionError(
            f"Field {_format_path(path)} has type {type(found).__name__}, expected {_type_names(expected)}",
            path=path,
        )
    return found


def _type_names(expected: type | tuple) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__
