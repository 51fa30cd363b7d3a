"""
Path classification for deletion targets.

A path alternates collection names and document ids:
``users`` (collection), ``users/alice`` (document),
``users/alice/posts`` (collection), and so on.
"""
import re
from dataclasses import dataclass
from typing import Union

from firestore_cleanup.errors import InvalidPathError

PATH_SEPARATOR = "/"

# Firestore reserves ids of the form __name__
_RESERVED_SEGMENT = re.compile(r"^__.*__$")


@dataclass(frozen=True)
class DocumentScope:
    """A single document."""

    path: str


@dataclass(frozen=True)
class CollectionScope:
    """Every document directly under one collection."""

    path: str


@dataclass(frozen=True)
class AllCollectionsScope:
    """Every top-level collection in the database."""

    path: str = ""


Scope = Union[DocumentScope, CollectionScope, AllCollectionsScope]


def split_path(path: str) -> list[str]:
    """
    Split a path into its segments, validating structure.

    Args:
        path: Slash-separated path

    Returns:
        List of non-empty segments

    Raises:
        InvalidPathError: If the path is empty or malformed
    """
    if path is None or not isinstance(path, str):
        raise InvalidPathError("Path must be a non-empty string.")

    path = path.strip()
    if not path:
        raise InvalidPathError("Path length must be greater than zero.")

    if path.startswith(PATH_SEPARATOR) or path.endswith(PATH_SEPARATOR):
        raise InvalidPathError(f"Path must not start or end with '/': {path!r}")

    segments = path.split(PATH_SEPARATOR)
    for segment in segments:
        if not segment:
            raise InvalidPathError(f"Path must not have any empty segments: {path!r}")
        if segment in (".", ".."):
            raise InvalidPathError(f"Path segment {segment!r} is not allowed: {path!r}")
        if _RESERVED_SEGMENT.match(segment):
            raise InvalidPathError(f"Path segment {segment!r} is reserved: {path!r}")

    return segments


def classify(path: str) -> Union[DocumentScope, CollectionScope]:
    """
    Classify a path as a document or a collection.

    Even segment count identifies a document, odd count a collection.

    Raises:
        InvalidPathError: If the path is empty or malformed
    """
    segments = split_path(path)
    normalized = PATH_SEPARATOR.join(segments)

    if len(segments) % 2 == 0:
        return DocumentScope(normalized)
    return CollectionScope(normalized)


def join_path(*parts: str) -> str:
    """Join path parts, skipping empty ones (the database root is "")."""
    return PATH_SEPARATOR.join(part for part in parts if part)
