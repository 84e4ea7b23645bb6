from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends
from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from backend.dependencies import get_skill_service
from backend.dof_api import router as dof_router
from backend.responses import error_response
from configs.appconfig import AppConfig
from configs.skill_models import DatabaseExportRequest
from configs.skill_models import SavedPositionRequest
from configs.skill_models import SkillDocument
from skill_tools.errors import ArtifactNotFoundError
from skill_tools.errors import DatabaseNotFoundError
from skill_tools.errors import PositionNotFoundError
from skill_tools.errors import SkillNotFoundError
from skill_tools.errors import SkillValidationError
from skill_tools.skill_service import SkillService

logger = logging.getLogger(__name__)

API = AppConfig.API_PREFIX

app = FastAPI(title='AIRA Skill Export API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=AppConfig.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(dof_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors: 400 {error}."""
    details = '; '.join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return error_response(400, f'Invalid request: {details}' if details else 'Invalid request')


def file_download(stored) -> FileResponse:
    # filename= sets Content-Disposition: attachment
    return FileResponse(stored.path, media_type=stored.media_type, filename=stored.download_name)


@app.get('/')
def root():
    return {'message': 'AIRA Skill Export API is running'}


@app.get(f'{API}/status')
def get_status():
    return {
        'status': 'operational',
        'message': 'Skill export backend is running successfully',
    }


# =============================================================================
# Skills
# =============================================================================

@app.get(f'{API}/skills')
def list_skills(service: SkillService = Depends(get_skill_service)):
    """Summaries of all stored skills."""
    try:
        return [summary.model_dump(by_alias=True) for summary in service.list_summaries()]
    except Exception:
        logger.exception('Error getting skills')
        return error_response(500, 'Failed to get skills')


@app.get(f'{API}/skills/{{skill_id}}')
def get_skill(skill_id: str, service: SkillService = Depends(get_skill_service)):
    try:
        return service.get(skill_id).to_record()
    except SkillNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error getting skill {skill_id}')
        return error_response(500, 'Failed to get skill')


@app.post(f'{API}/skills', status_code=201)
def create_skill(skill: SkillDocument, service: SkillService = Depends(get_skill_service)):
    """
    Create a skill and its export artifact.

    Request body (PascalCase, as stored):
        {
            "SkillName": "Wave",              # required
            "Description": "...",
            "Author": "...",
            "Format": "json" | "xml" | "arcskill",
            "DOFData": {"Right_Elbow": 45, ...},
            "SavedPositions": {"Start": {...}, ...}
        }

    Returns:
        201 {"id", "message", "downloadUrl"}
    """
    try:
        document, _ = service.create(skill)
        return {
            'id': document.id,
            'message': 'Skill created successfully',
            'downloadUrl': f'{API}/download/{document.id}',
        }
    except SkillValidationError as e:
        return error_response(400, str(e))
    except Exception:
        logger.exception('Error creating skill')
        return error_response(500, 'Failed to create skill')


@app.delete(f'{API}/skills/{{skill_id}}')
def delete_skill(skill_id: str, service: SkillService = Depends(get_skill_service)):
    try:
        service.delete(skill_id)
        return {'message': 'Skill deleted successfully'}
    except SkillNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error deleting skill {skill_id}')
        return error_response(500, 'Failed to delete skill')


# =============================================================================
# Saved positions
# =============================================================================

@app.get(f'{API}/skills/{{skill_id}}/positions')
def get_positions(skill_id: str, service: SkillService = Depends(get_skill_service)):
    try:
        return service.get_positions(skill_id)
    except SkillNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error getting positions for {skill_id}')
        return error_response(500, 'Failed to get positions')


@app.post(f'{API}/skills/{{skill_id}}/positions', status_code=201)
def add_position(skill_id: str, position: SavedPositionRequest, service: SkillService = Depends(get_skill_service)):
    """Body: {"name": "Wave Up", "positions": {"Right_Shoulder": 150, ...}}"""
    try:
        service.add_saved_position(skill_id, position.name, position.positions)
        return {
            'message': 'Position added successfully',
            'name': position.name,
        }
    except SkillValidationError as e:
        return error_response(400, str(e))
    except SkillNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error adding position to {skill_id}')
        return error_response(500, 'Failed to add position')


@app.delete(f'{API}/skills/{{skill_id}}/positions/{{position_name}}')
def delete_position(skill_id: str, position_name: str, service: SkillService = Depends(get_skill_service)):
    try:
        service.delete_saved_position(skill_id, position_name)
        return {'message': 'Position deleted successfully'}
    except (PositionNotFoundError, SkillNotFoundError) as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error deleting position {position_name} from {skill_id}')
        return error_response(500, 'Failed to delete position')


# =============================================================================
# Downloads and exports
# =============================================================================

@app.get(f'{API}/download/{{skill_id}}')
def download_skill(skill_id: str, service: SkillService = Depends(get_skill_service)):
    """Export file for the skill's stored Format (regenerated if missing or stale)."""
    try:
        return file_download(service.download(skill_id))
    except SkillNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error downloading skill {skill_id}')
        return error_response(500, 'Failed to download skill')


@app.post(f'{API}/export/arc/{{skill_id}}')
def export_skill_to_arc(skill_id: str, service: SkillService = Depends(get_skill_service)):
    try:
        stored = service.export_arc(skill_id)
        return {
            'success': True,
            'message': 'Skill exported to ARC format successfully',
            'filename': stored.filename,
            'downloadUrl': f'{API}/download/arc/{stored.filename}',
        }
    except SkillNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception(f'Error exporting skill {skill_id} to ARC format')
        return error_response(500, 'Failed to export skill to ARC format')


@app.get(f'{API}/download/arc/{{filename}}')
def download_arc_package(filename: str, service: SkillService = Depends(get_skill_service)):
    try:
        if not filename.endswith('.arcskill'):
            raise ArtifactNotFoundError(filename)
        return file_download(service.resolve_export(filename))
    except ArtifactNotFoundError:
        return error_response(404, 'ARC skill package not found')
    except Exception:
        logger.exception(f'Error downloading ARC package {filename}')
        return error_response(500, 'Failed to download ARC skill package')


@app.post(f'{API}/export/database')
def export_database(
    request: Optional[DatabaseExportRequest] = None,
    service: SkillService = Depends(get_skill_service),
):
    """
    Export every stored skill as one file.

    Request body:
        {
            "format": "json" | "xml" | "csv",   # default json
            "includePositions": false,           # drop SavedPositions when false
            "includeMetadata": false             # drop ExportDate/Author when false
        }
    """
    request = request or DatabaseExportRequest()
    try:
        stored = service.export_database(request.format, request.include_positions, request.include_metadata)
        return {
            'success': True,
            'message': 'Database exported successfully',
            'filename': stored.filename,
            'downloadUrl': f'{API}/download/database/{stored.filename}',
        }
    except DatabaseNotFoundError as e:
        return error_response(404, str(e))
    except Exception:
        logger.exception('Error exporting database')
        return error_response(500, 'Failed to export database')


@app.get(f'{API}/download/database/{{filename}}')
def download_database_export(filename: str, service: SkillService = Depends(get_skill_service)):
    try:
        if not filename.startswith('database_export_'):
            raise ArtifactNotFoundError(filename)
        return file_download(service.resolve_export(filename))
    except ArtifactNotFoundError:
        return error_response(404, 'Database export not found')
    except Exception:
        logger.exception(f'Error downloading database export {filename}')
        return error_response(500, 'Failed to download database export')
