"""
errors.py - Exception hierarchy for skill storage and export.

The HTTP layer maps these to status codes:
  - SkillValidationError  -> 400
  - SkillNotFoundError    -> 404 (PositionNotFoundError, ArtifactNotFoundError,
                             DatabaseNotFoundError too)
  - anything else         -> 500
"""
from __future__ import annotations


class SkillStoreError(Exception):
    """Base class for skill store failures."""


class SkillValidationError(SkillStoreError):
    """A required field is missing or malformed."""


class SkillNotFoundError(SkillStoreError):
    """No skill document exists for the given id."""

    def __init__(self, skill_id: str, message: str = 'Skill not found'):
        super().__init__(message)
        self.skill_id = skill_id


class PositionNotFoundError(SkillNotFoundError):
    """The skill exists but has no saved position with the given name."""

    def __init__(self, skill_id: str, position_name: str):
        super().__init__(skill_id, 'Position not found')
        self.position_name = position_name


class ArtifactNotFoundError(SkillStoreError):
    """A requested export file does not exist in the exports directory."""

    def __init__(self, filename: str, message: str = 'File not found'):
        super().__init__(message)
        self.filename = filename


class UnsupportedFormatError(SkillStoreError, ValueError):
    """Export was requested in a format no exporter handles."""

    def __init__(self, fmt: str):
        super().__init__(f'Unsupported format: {fmt}')
        self.format = fmt


class DatabaseNotFoundError(SkillStoreError):
    """Bulk export requested before any skill was stored."""

    def __init__(self, message: str = 'No database found'):
        super().__init__(message)
