import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from backend.dependencies import get_job_queue  # noqa: E402
from backend.dependencies import get_skill_service  # noqa: E402
from configs.skill_models import SkillDocument  # noqa: E402
from skill_tools.artifacts import ArtifactStore  # noqa: E402
from skill_tools.jobs import make_default_job_queue  # noqa: E402
from skill_tools.repository import FileSkillRepository  # noqa: E402
from skill_tools.skill_service import SkillService  # noqa: E402


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / 'data'


@pytest.fixture
def export_dir(tmp_path):
    return tmp_path / 'exports'


@pytest.fixture
def repository(data_dir):
    return FileSkillRepository(data_dir)


@pytest.fixture
def artifacts(export_dir):
    return ArtifactStore(export_dir)


@pytest.fixture
def service(repository, artifacts):
    return SkillService(repository, artifacts)


@pytest.fixture
def wave_skill_data():
    """Skill body as the UI posts it."""
    with open(Path(__file__).parent / 'wave_skill.json') as f:
        return json.load(f)


@pytest.fixture
def wave_skill(wave_skill_data):
    return SkillDocument.model_validate(wave_skill_data)


@pytest.fixture
def client(service):
    """TestClient bound to temporary data/export directories."""
    from fastapi.testclient import TestClient

    from backend.query_api import app

    queue = make_default_job_queue()

    app.dependency_overrides[get_skill_service] = lambda: service
    app.dependency_overrides[get_job_queue] = lambda: queue
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()