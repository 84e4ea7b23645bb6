"""
jobs.py - Background job interface for long-running work (DOF extraction
from video).

JobQueue is the contract a real worker pool would implement:

    submit(kind, payload) -> job_id
    poll(job_id)          -> JobRecord (status queued|running|completed|failed)

MockJobQueue runs the registered handler inline during submit(), so every
job is already completed (or failed) by the first poll. No video is
actually processed; the DOF extraction handler returns a canned frame.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from skill_tools.errors import SkillStoreError
from skill_tools.servo_registry import default_dof_vector

logger = logging.getLogger(__name__)

DOF_EXTRACTION = 'dof-extraction'


class JobStatus(str, Enum):
    QUEUED = 'queued'
    RUNNING = 'running'
    COMPLETED = 'completed'
    FAILED = 'failed'


class JobNotFoundError(SkillStoreError):
    def __init__(self, job_id: str):
        super().__init__('Job not found')
        self.job_id = job_id


@dataclass
class JobRecord:
    job_id: str
    kind: str
    payload: dict
    status: JobStatus = JobStatus.QUEUED
    progress: int = 0
    result: Any = None
    error: str | None = None
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            'jobId': self.job_id,
            'kind': self.kind,
            'status': self.status.value,
            'progress': self.progress,
            'result': self.result,
            'error': self.error,
        }


class JobQueue(Protocol):
    def submit(self, kind: str, payload: dict) -> str: ...

    def poll(self, job_id: str) -> JobRecord: ...


class MockJobQueue:
    """In-memory queue that completes each job synchronously on submit."""

    def __init__(self, handlers: dict[str, Callable[[dict], Any]] | None = None):
        self.handlers = dict(handlers or {})
        self._jobs: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def register(self, kind: str, handler: Callable[[dict], Any]) -> None:
        self.handlers[kind] = handler

    def submit(self, kind: str, payload: dict) -> str:
        if kind not in self.handlers:
            raise ValueError(f'No handler registered for job kind: {kind}')

        job_id = f'{kind}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}'
        job = JobRecord(job_id=job_id, kind=kind, payload=dict(payload))
        with self._lock:
            self._jobs[job_id] = job

        self._run(job)
        return job_id

    def _run(self, job: JobRecord) -> None:
        job.status = JobStatus.RUNNING
        try:
            job.result = self.handlers[job.kind](job.payload)
            job.status = JobStatus.COMPLETED
            job.progress = 100
        except Exception as e:
            logger.exception(f'Job {job.job_id} failed')
            job.status = JobStatus.FAILED
            job.error = str(e)

    def poll(self, job_id: str) -> JobRecord:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job


def mock_dof_extraction(payload: dict) -> dict:
    """Canned single-frame extraction result for a video."""
    dof_data = default_dof_vector()
    dof_data.update({
        'Head_Tilt': 85,
        'Left_Shoulder': 120,
        'Left_Elbow': 45,
        'Right_Shoulder': 60,
        'Right_Shoulder_Pan': 60,
        'Right_Elbow': 135,
        'Torso': 95,
        'Left_Hip': 100,
        'Left_Knee': 110,
        'Right_Hip': 80,
        'Right_Knee': 70,
    })
    return {
        'videoId': payload.get('video_id'),
        'dofData': dof_data,
        'frames': 120,
        'duration': '10 seconds',
    }


def make_default_job_queue() -> MockJobQueue:
    return MockJobQueue({DOF_EXTRACTION: mock_dof_extraction})
