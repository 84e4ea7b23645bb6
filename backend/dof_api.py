"""
/api/dof routes: mocap -> DOF conversion, DOF export, and the (mocked)
DOF-from-video job endpoints.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import FileResponse

from backend.dependencies import get_job_queue
from backend.dependencies import get_skill_service
from backend.responses import error_response
from configs.appconfig import AppConfig
from configs.skill_models import DOFConvertRequest
from configs.skill_models import DOFExportRequest
from skill_tools.dof_aggregator import convert_to_dof
from skill_tools.errors import ArtifactNotFoundError
from skill_tools.errors import SkillValidationError
from skill_tools.jobs import DOF_EXTRACTION
from skill_tools.jobs import JobNotFoundError
from skill_tools.jobs import JobQueue
from skill_tools.skill_service import SkillService

logger = logging.getLogger(__name__)

DOF_PREFIX = f'{AppConfig.API_PREFIX}/dof'

router = APIRouter(prefix=DOF_PREFIX)


@router.post('/convert')
def convert_mocap(request: DOFConvertRequest):
    """
    Convert one frame of pose landmarks to a full DOF vector.

    Request body:
        {
            "mocapData": {"landmarks": {"0": {"x": .5, "y": .4, "z": 0}, ...}},
            "metadata": {...}          # accepted, unused
        }
    """
    if request.mocap_data is None or request.mocap_data.landmarks is None:
        return error_response(400, 'Invalid mocap data format')

    try:
        dof_data = convert_to_dof(request.mocap_data)
        return {
            'success': True,
            'dofData': dof_data,
            'message': 'Mocap data converted to DOF successfully',
        }
    except Exception:
        logger.exception('Error converting mocap data')
        return error_response(500, 'Failed to convert mocap data')


@router.post('/export')
def export_dof(request: DOFExportRequest, service: SkillService = Depends(get_skill_service)):
    """
    Write a DOF vector as json, xml or arcskill.

    Request body:
        {
            "dofData": {"Head_Pan": 90, ...},
            "metadata": {"name", "description", "author", "positions",
                         "frameRate", "loop", "smoothing"},
            "format": "json" | "xml" | "arcskill"
        }
    """
    try:
        stored = service.export_dof(request.dof_data, request.metadata, request.format)
        return {
            'success': True,
            'message': f'DOF data exported to {request.format} successfully',
            'filename': stored.filename,
            'downloadUrl': f'{DOF_PREFIX}/download/{stored.filename}',
        }
    except SkillValidationError as e:
        return error_response(400, str(e))
    except Exception:
        logger.exception('Error exporting DOF data')
        return error_response(500, 'Failed to export DOF data')


@router.get('/download/{filename}')
def download_dof_export(filename: str, service: SkillService = Depends(get_skill_service)):
    try:
        stored = service.resolve_export(filename)
        return FileResponse(stored.path, media_type=stored.media_type, filename=stored.download_name)
    except ArtifactNotFoundError:
        return error_response(404, 'File not found')
    except Exception:
        logger.exception(f'Error downloading DOF file {filename}')
        return error_response(500, 'Failed to download DOF file')


@router.post('/from-video/{video_id}')
def extract_dof_from_video(video_id: str, jobs: JobQueue = Depends(get_job_queue)):
    """Submit a DOF extraction job; poll /api/dof/status/{jobId} for the result."""
    try:
        job_id = jobs.submit(DOF_EXTRACTION, {'video_id': video_id})
        return {
            'success': True,
            'message': 'DOF data extraction started',
            'jobId': job_id,
            'estimatedTime': '2 minutes',
        }
    except Exception:
        logger.exception(f'Error extracting DOF data from video {video_id}')
        return error_response(500, 'Failed to extract DOF data from video')


@router.get('/status/{job_id}')
def get_extraction_status(job_id: str, jobs: JobQueue = Depends(get_job_queue)):
    try:
        job = jobs.poll(job_id)
        return {
            'success': True,
            'jobId': job.job_id,
            'status': job.status.value,
            'progress': job.progress,
            'result': job.result,
            'error': job.error,
        }
    except JobNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error checking DOF extraction status for {job_id}')
        return error_response(500, 'Failed to check DOF extraction status')
