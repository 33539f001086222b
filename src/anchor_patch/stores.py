"""
Document and annotation storage.

The engine never touches storage itself; ``ReviewSession`` is handed a
document store and an annotation store. In-memory implementations are meant
for tests and embedding, file-backed ones for a directory of markdown files
with a flat ``.comments.json`` next to it.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from .constants import DOCUMENT_SUFFIXES, EXCLUDED_DIRS
from .errors import DocumentNotFoundError, InvalidInputError, StoreError
from .models.annotation import Annotation

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Reads and writes raw document text by document id."""

    def read(self, document_id: str) -> str: ...

    def write(self, document_id: str, text: str) -> None: ...


class AnnotationStore(Protocol):
    """Holds the whole annotation collection; saves overwrite it."""

    def load(self) -> list[Annotation]: ...

    def list(self, document_id: str | None = None) -> list[Annotation]: ...

    def save(self, annotations: Iterable[Annotation]) -> None: ...


class InMemoryDocumentStore:
    """Document store backed by a dictionary."""

    def __init__(self, documents: dict[str, str] | None = None) -> None:
        self._documents = dict(documents or {})

    def read(self, document_id: str) -> str:
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentNotFoundError(document_id) from None

    def write(self, document_id: str, text: str) -> None:
        self._documents[document_id] = text

    def list_documents(self) -> list[str]:
        return sorted(self._documents)


class FileDocumentStore:
    """Document store over a directory of UTF-8 text files.

    Document ids are paths relative to ``root`` (e.g. ``"ads/hooks.md"``).
    Ids that resolve outside ``root`` are rejected.

    Example:
        >>> store = FileDocumentStore("campaigns")
        >>> text = store.read("ads/hooks.md")
        >>> store.write("ads/hooks.md", text.replace("15 hours", "20 hours"))
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def path_for(self, document_id: str) -> Path:
        """Resolve a document id to a path inside the root.

        Raises:
            InvalidInputError: If the id is empty or escapes the root
        """
        if not document_id:
            raise InvalidInputError("Document id must be a non-empty string")
        path = (self.root / document_id).resolve()
        if path != self.root and self.root not in path.parents:
            raise InvalidInputError(f"Document id '{document_id}' is outside {self.root}")
        return path

    def read(self, document_id: str) -> str:
        path = self.path_for(document_id)
        if not path.is_file():
            raise DocumentNotFoundError(document_id)
        # newline="" keeps \r\n intact so offsets match the bytes on disk
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, document_id: str, text: str) -> None:
        path = self.path_for(document_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        logger.debug("Wrote %d characters to %s", len(text), path)

    def list_documents(self) -> list[str]:
        """List reviewable documents (``.md`` and ``.json``) under the root.

        Hidden entries and dependency folders are skipped.

        Returns:
            Sorted POSIX-style paths relative to the root
        """
        found = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = [
                d for d in dirnames if not d.startswith(".") and d not in EXCLUDED_DIRS
            ]
            for name in filenames:
                if name.startswith(".") or not name.endswith(DOCUMENT_SUFFIXES):
                    continue
                found.append((Path(dirpath) / name).relative_to(self.root).as_posix())
        return sorted(found)


class InMemoryAnnotationStore:
    """Annotation store backed by a list."""

    def __init__(self, annotations: Iterable[Annotation] | None = None) -> None:
        self._annotations = list(annotations or [])

    def load(self) -> list[Annotation]:
        return list(self._annotations)

    def list(self, document_id: str | None = None) -> list[Annotation]:
        return [a for a in self._annotations if document_id is None or a.document_id == document_id]

    def save(self, annotations: Iterable[Annotation]) -> None:
        self._annotations = list(annotations)


class JsonAnnotationStore:
    """Annotation store persisted as one JSON array (``.comments.json``).

    A missing file is an empty collection. Every save rewrites the whole file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[Annotation]:
        """Load every annotation from the file.

        Raises:
            StoreError: If the file is not valid JSON or an entry is malformed
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Annotation file is not valid JSON: {e}", path=str(self.path)) from e

        if not isinstance(data, list):
            raise StoreError("Annotation file must contain a JSON array", path=str(self.path))

        try:
            return [Annotation.from_dict(entry) for entry in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed annotation entry: {e}", path=str(self.path)) from e

    def list(self, document_id: str | None = None) -> list[Annotation]:
        return [a for a in self.load() if document_id is None or a.document_id == document_id]

    def save(self, annotations: Iterable[Annotation]) -> None:
        data = [annotation.to_dict() for annotation in annotations]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug("Saved %d annotation(s) to %s", len(data), self.path)
