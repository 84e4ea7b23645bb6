"""
repository.py - Skill document storage.

SkillRepository is the storage interface; FileSkillRepository keeps one
pretty-printed JSON file per document ('{id}.json') in a data directory.
The directory listing is the index.

update() runs read-modify-write under a per-document lock, so concurrent
edits inside one process are serialized. Separate processes writing the
same document still race (last writer wins).
"""
from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Callable, Protocol

from configs.skill_models import SkillDocument
from skill_tools.errors import SkillNotFoundError

logger = logging.getLogger(__name__)

SKILL_ID_PATTERN = re.compile(r'^[\w-][\w.-]*$')


class SkillRepository(Protocol):
    def create(self, document: SkillDocument) -> SkillDocument: ...

    def get(self, skill_id: str) -> SkillDocument: ...

    def list(self) -> list[SkillDocument]: ...

    def update(self, skill_id: str, mutator: Callable[[SkillDocument], None]) -> SkillDocument: ...

    def delete(self, skill_id: str) -> SkillDocument: ...

    def has_store(self) -> bool: ...


class FileSkillRepository:
    """Flat-file JSON store: data_dir/{id}.json."""

    def __init__(self, data_dir):
        self.data_dir = Path(data_dir)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _path(self, skill_id: str) -> Path:
        if not skill_id or not SKILL_ID_PATTERN.match(skill_id):
            raise SkillNotFoundError(str(skill_id))
        return self.data_dir / f'{skill_id}.json'

    def _lock_for(self, skill_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(skill_id, threading.Lock())

    def _read(self, path: Path) -> SkillDocument:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
        document = SkillDocument.model_validate(data)
        # the file name is the identity
        document.id = path.stem
        return document

    def _write(self, document: SkillDocument, mode: str = 'w') -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(document.id)
        with open(path, mode, encoding='utf-8') as f:
            json.dump(document.to_record(), f, indent=2)

    def has_store(self) -> bool:
        return self.data_dir.is_dir()

    def create(self, document: SkillDocument) -> SkillDocument:
        """
        Write a new document file.

        Raises:
            FileExistsError: if a document with this id is already stored
        """
        if not document.id:
            raise ValueError('Document id must be assigned before create')
        self._write(document, mode='x')
        logger.info(f'Created skill {document.id}')
        return document

    def get(self, skill_id: str) -> SkillDocument:
        path = self._path(skill_id)
        if not path.exists():
            raise SkillNotFoundError(skill_id)
        return self._read(path)

    def list(self) -> list[SkillDocument]:
        """All readable documents, ordered by filename. Unreadable files are skipped."""
        if not self.data_dir.exists():
            return []

        documents = []
        for path in sorted(self.data_dir.glob('*.json')):
            try:
                documents.append(self._read(path))
            except Exception as e:
                logger.warning(f'Skipping unreadable skill file {path.name}: {e}')
        return documents

    def update(self, skill_id: str, mutator: Callable[[SkillDocument], None]) -> SkillDocument:
        """Read the document, apply mutator in place, rewrite the whole file."""
        with self._lock_for(skill_id):
            document = self.get(skill_id)
            mutator(document)
            self._write(document)
        return document

    def delete(self, skill_id: str) -> SkillDocument:
        with self._lock_for(skill_id):
            document = self.get(skill_id)
            self._path(skill_id).unlink()
        with self._locks_guard:
            self._locks.pop(skill_id, None)
        logger.info(f'Deleted skill {skill_id}')
        return document
