"""
Shared FastAPI dependencies.

Both are process-wide singletons built from configs.appconfig on first
use; tests swap them with app.dependency_overrides.
"""
from __future__ import annotations

from functools import lru_cache

from configs.appconfig import DATA_DIR
from configs.appconfig import EXPORT_DIR
from skill_tools.artifacts import ArtifactStore
from skill_tools.jobs import make_default_job_queue
from skill_tools.jobs import MockJobQueue
from skill_tools.repository import FileSkillRepository
from skill_tools.skill_service import SkillService


@lru_cache(maxsize=1)
def get_skill_service() -> SkillService:
    return SkillService(FileSkillRepository(DATA_DIR), ArtifactStore(EXPORT_DIR))


@lru_cache(maxsize=1)
def get_job_queue() -> MockJobQueue:
    return make_default_job_queue()
