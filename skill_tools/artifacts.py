"""
artifacts.py - Export files on disk.

Per-document artifacts are derived data, keyed by a content digest:

    {id}.{digest}.{ext}      digest = sha256(format + canonical document JSON)[:16]

so an edited document no longer matches its old artifact and the next
download regenerates it. Stale artifacts for the same id and extension are
removed when a new one is written.

Other files in the exports directory:

    {id}_arc_{epoch-ms}.arcskill          forced ARC exports (accumulate)
    database_export_{timestamp}.{ext}     bulk exports
    {name}_{timestamp}.{ext}              DOF exports
"""
from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from pathlib import Path

from configs.skill_models import SkillFormat
from skill_tools.errors import ArtifactNotFoundError
from skill_tools.exporters import coerce_format
from skill_tools.exporters import export_skill
from skill_tools.exporters import media_type_for_filename
from skill_tools.exporters import sanitize_name
from skill_tools.schemas import ExportArtifact
from skill_tools.schemas import StoredExport

logger = logging.getLogger(__name__)

SKILL_EXTENSIONS = tuple(fmt.extension for fmt in SkillFormat)


def content_digest(document, fmt: SkillFormat) -> str:
    canonical = json.dumps(
        {'format': fmt.value, 'document': document.to_record()},
        sort_keys=True,
        separators=(',', ':'),
    )
    return hashlib.sha256(canonical.encode('utf-8')).hexdigest()[:16]


def epoch_ms() -> int:
    return int(time.time() * 1000)


class ArtifactStore:
    """Reads and writes export files under one exports directory."""

    def __init__(self, export_dir):
        self.export_dir = Path(export_dir)

    def _artifact_pattern(self, skill_id: str, extension: str | None = None) -> re.Pattern:
        ext = re.escape(extension) if extension else '|'.join(SKILL_EXTENSIONS)
        return re.compile(
            rf'^{re.escape(skill_id)}(\.[0-9a-f]{{16}}|_arc_\d+)?\.({ext})$'
        )

    def artifact_path(self, document, fmt: SkillFormat) -> Path:
        digest = content_digest(document, fmt)
        return self.export_dir / f'{document.id}.{digest}.{fmt.extension}'

    def artifacts_for(self, skill_id: str, extension: str | None = None) -> list[Path]:
        """Every export file belonging to one skill id."""
        if not self.export_dir.exists():
            return []
        pattern = self._artifact_pattern(skill_id, extension)
        return sorted(p for p in self.export_dir.iterdir() if p.is_file() and pattern.match(p.name))

    def write(self, artifact: ExportArtifact, filename: str) -> StoredExport:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = self.export_dir / filename
        path.write_bytes(artifact.content)
        logger.info(f'Wrote export {path.name} ({len(artifact.content)} bytes)')
        return StoredExport(path=path, media_type=artifact.media_type, download_name=artifact.filename)

    def ensure(self, document, fmt=None) -> StoredExport:
        """
        Return the artifact for the document's current content, generating it
        if missing. The document's own Format is used when fmt is not given.
        """
        fmt = coerce_format(fmt, SkillFormat, document.format)
        path = self.artifact_path(document, fmt)
        download_name = f'{sanitize_name(document.skill_name)}.{fmt.extension}'

        if path.exists():
            return StoredExport(path=path, media_type=fmt.media_type, download_name=download_name)

        stored = self.write(export_skill(document, fmt), path.name)
        self._remove_stale(document.id, fmt, keep=path)
        return stored

    def _remove_stale(self, skill_id: str, fmt: SkillFormat, keep: Path) -> None:
        digest_pattern = re.compile(rf'^{re.escape(skill_id)}\.[0-9a-f]{{16}}\.{re.escape(fmt.extension)}$')
        for path in self.artifacts_for(skill_id, fmt.extension):
            if path != keep and digest_pattern.match(path.name):
                path.unlink(missing_ok=True)
                logger.debug(f'Removed stale artifact {path.name}')

    def write_forced_arc(self, document) -> StoredExport:
        """Always write a fresh, timestamped ARC package for the document."""
        artifact = export_skill(document, SkillFormat.ARCSKILL)
        return self.write(artifact, f'{document.id}_arc_{epoch_ms()}.{SkillFormat.ARCSKILL.extension}')

    def delete_for(self, skill_id: str) -> int:
        """Remove all artifacts of a skill in every format. Returns the count."""
        paths = self.artifacts_for(skill_id)
        for path in paths:
            path.unlink(missing_ok=True)
        if paths:
            logger.info(f'Removed {len(paths)} export(s) for {skill_id}')
        return len(paths)

    def resolve(self, filename: str) -> StoredExport:
        """
        Look up a file by name in the exports directory.

        Raises:
            ArtifactNotFoundError: if missing, or if the name would escape
                the exports directory
        """
        if not filename or Path(filename).name != filename or filename in ('.', '..'):
            raise ArtifactNotFoundError(filename)

        path = self.export_dir / filename
        if not path.is_file() or path.resolve().parent != self.export_dir.resolve():
            raise ArtifactNotFoundError(filename)

        return StoredExport(path=path, media_type=media_type_for_filename(filename), download_name=filename)
