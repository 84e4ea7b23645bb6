"""
skill_service.py - Skill document operations.

Ties the repository (source of truth) to the artifact store (derived
exports). The HTTP layer calls these and maps errors to status codes.

Create writes the document first and its export second; if the export
fails the document stays (no rollback) and the artifact is regenerated on
the next download.
"""
from __future__ import annotations

import logging
from datetime import datetime
from datetime import timezone

from configs.skill_models import DOFExportMetadata
from configs.skill_models import SkillDocument
from configs.skill_models import SkillFormat
from configs.skill_models import SkillSummary
from skill_tools.artifacts import ArtifactStore
from skill_tools.artifacts import epoch_ms
from skill_tools.errors import DatabaseNotFoundError
from skill_tools.errors import PositionNotFoundError
from skill_tools.errors import SkillValidationError
from skill_tools.exporters import coerce_format
from skill_tools.exporters import export_database
from skill_tools.exporters import export_skill
from skill_tools.exporters import filter_record
from skill_tools.exporters import sanitize_name
from skill_tools.exporters import timestamp_slug
from skill_tools.repository import SkillRepository
from skill_tools.schemas import StoredExport

logger = logging.getLogger(__name__)

DEFAULT_DOF_SKILL_NAME = 'Exported Skill'
DEFAULT_DOF_DESCRIPTION = 'Skill exported from mocap data'
DEFAULT_DOF_AUTHOR = 'AIRA Robot Skill Export'


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC with milliseconds and a 'Z' suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def make_skill_id(name: str, ms: int | None = None) -> str:
    return f'{sanitize_name(name)}_{epoch_ms() if ms is None else ms}'


def summarize(document: SkillDocument) -> SkillSummary:
    return SkillSummary(
        id=document.id,
        name=document.skill_name or 'Unnamed Skill',
        description=document.description or '',
        export_date=document.export_date or utc_timestamp(),
        format=document.format.value,
        author=document.author or 'Unknown',
    )


class SkillService:

    def __init__(self, repository: SkillRepository, artifacts: ArtifactStore):
        self.repository = repository
        self.artifacts = artifacts

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def create(self, document: SkillDocument) -> tuple[SkillDocument, StoredExport]:
        """
        Assign id and export date, persist, and write the export artifact
        for the document's Format.

        Raises:
            SkillValidationError: if SkillName is empty
        """
        if not document.skill_name or not document.skill_name.strip():
            raise SkillValidationError('Skill name is required')

        document = document.model_copy(deep=True)
        if not document.export_date:
            document.export_date = utc_timestamp()

        # same name in the same millisecond: bump until the id is free
        ms = epoch_ms()
        while True:
            document.id = make_skill_id(document.skill_name, ms)
            try:
                self.repository.create(document)
                break
            except FileExistsError:
                ms += 1

        stored = self.artifacts.ensure(document)
        return document, stored

    def get(self, skill_id: str) -> SkillDocument:
        return self.repository.get(skill_id)

    def list_summaries(self) -> list[SkillSummary]:
        return [summarize(doc) for doc in self.repository.list()]

    def delete(self, skill_id: str) -> None:
        """Remove the document and every export artifact for it."""
        self.repository.delete(skill_id)
        self.artifacts.delete_for(skill_id)

    # -------------------------------------------------------------------------
    # Saved positions
    # -------------------------------------------------------------------------

    def get_positions(self, skill_id: str) -> dict:
        return self.repository.get(skill_id).saved_positions

    def add_saved_position(self, skill_id: str, position_name: str | None, dof_vector: dict | None) -> SkillDocument:
        """Add or overwrite one named position (last write wins)."""
        if not position_name or dof_vector is None:
            raise SkillValidationError('Position name and data are required')

        def _add(document: SkillDocument):
            positions = dict(document.saved_positions)
            positions[position_name] = dict(dof_vector)
            document.saved_positions = positions

        document = self.repository.update(skill_id, _add)
        logger.info(f"Saved position '{position_name}' on {skill_id}")
        return document

    def delete_saved_position(self, skill_id: str, position_name: str) -> SkillDocument:
        def _delete(document: SkillDocument):
            if position_name not in document.saved_positions:
                raise PositionNotFoundError(skill_id, position_name)
            positions = dict(document.saved_positions)
            del positions[position_name]
            document.saved_positions = positions

        document = self.repository.update(skill_id, _delete)
        logger.info(f"Deleted position '{position_name}' from {skill_id}")
        return document

    # -------------------------------------------------------------------------
    # Exports
    # -------------------------------------------------------------------------

    def download(self, skill_id: str) -> StoredExport:
        """Artifact for the document's stored Format, regenerated if stale or missing."""
        return self.artifacts.ensure(self.repository.get(skill_id))

    def export_arc(self, skill_id: str) -> StoredExport:
        return self.artifacts.write_forced_arc(self.repository.get(skill_id))

    def export_database(self, fmt, include_positions: bool = False, include_metadata: bool = False) -> StoredExport:
        """
        Export every stored document as one timestamped file.

        The whole store is read into memory; no pagination.

        Raises:
            DatabaseNotFoundError: if nothing has been stored yet
        """
        if not self.repository.has_store():
            raise DatabaseNotFoundError()
        records = [
            filter_record(doc.to_record(), include_positions, include_metadata)
            for doc in self.repository.list()
        ]
        artifact = export_database(records, fmt)
        logger.info(f'Exporting database: {len(records)} skill(s) as {artifact.extension}')
        return self.artifacts.write(artifact, artifact.filename)

    def export_dof(self, dof_data: dict | None, metadata: DOFExportMetadata | None, fmt='json') -> StoredExport:
        """
        Wrap a bare DOF vector (e.g. from mocap conversion) in a skill
        document and export it without storing the document.
        """
        if dof_data is None:
            raise SkillValidationError('DOF data is required')

        metadata = metadata or DOFExportMetadata()
        fmt = coerce_format(fmt, SkillFormat, SkillFormat.JSON)

        document = SkillDocument(
            skill_name=metadata.name or DEFAULT_DOF_SKILL_NAME,
            description=metadata.description or DEFAULT_DOF_DESCRIPTION,
            author=metadata.author or DEFAULT_DOF_AUTHOR,
            export_date=utc_timestamp(),
            format=fmt,
            dof_data=dof_data,
            saved_positions=metadata.positions,
            Configuration={
                'FrameRate': metadata.frame_rate,
                'LoopEnabled': metadata.loop,
                'SmoothingFactor': metadata.smoothing,
            },
        )

        artifact = export_skill(document, fmt)
        filename = f'{sanitize_name(metadata.name or "", default="exported-skill")}_{timestamp_slug()}.{fmt.extension}'
        return self.artifacts.write(artifact, filename)

    def resolve_export(self, filename: str) -> StoredExport:
        return self.artifacts.resolve(filename)
