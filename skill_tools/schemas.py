"""
schemas.py - Data structures for skill export.

Dataclasses passed between the exporters, the artifact store and the API.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class ExportArtifact:
    """Serialized export of a skill (or of the whole database)."""
    content: bytes
    filename: str              # suggested download name, e.g. 'Wave.arcskill'
    media_type: str
    extension: str

    @property
    def text(self) -> str:
        return self.content.decode('utf-8')


@dataclass
class StoredExport:
    """An artifact that has been written to the exports directory."""
    path: Path
    media_type: str
    download_name: str

    @property
    def filename(self) -> str:
        return self.path.name

    def to_dict(self) -> dict:
        return {
            'filename': self.filename,
            'path': str(self.path),
            'media_type': self.media_type,
            'download_name': self.download_name,
        }
