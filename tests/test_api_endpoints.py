"""
Test FastAPI endpoints in backend/query_api.py and backend/dof_api.py

Brief tests for the HTTP surface:
- Health check endpoints
- Skill create / read / list / delete
- Saved positions
- Downloads, ARC and database exports
- Mocap conversion, DOF export and video jobs
"""
from __future__ import annotations

import json
from urllib.parse import quote

from backend.query_api import get_status


def create_wave(client, wave_skill_data):
    response = client.post('/api/skills', json=wave_skill_data)
    assert response.status_code == 201, f'Create failed: {response.text}'
    return response.json()['id']


def test_status_endpoint(client):
    """Test /api/status returns operational status"""
    assert get_status()['status'] == 'operational'
    result = client.get('/api/status').json()
    assert result['status'] == 'operational', f'Status check failed: {result}'
    assert 'message' in result, 'Missing message in status response'
    assert 'message' in client.get('/').json()


class TestSkills:

    def test_create_and_get(self, client, wave_skill_data):
        response = client.post('/api/skills', json=wave_skill_data)
        assert response.status_code == 201
        body = response.json()
        assert body['message'] == 'Skill created successfully'
        assert body['downloadUrl'] == f"/api/download/{body['id']}"

        skill = client.get(f"/api/skills/{body['id']}").json()
        assert skill['id'] == body['id']
        assert skill['SkillName'] == 'Wave Hello'
        assert skill['DOFData']['Right_Elbow'] == 45
        assert skill['ExportDate'].endswith('Z')

    def test_create_without_name(self, client):
        response = client.post('/api/skills', json={'Description': 'no name'})
        assert response.status_code == 400
        assert 'error' in response.json()

    def test_create_with_out_of_range_angle(self, client, wave_skill_data):
        wave_skill_data['DOFData']['Waist'] = 200
        response = client.post('/api/skills', json=wave_skill_data)
        assert response.status_code == 400
        assert 'error' in response.json()

    def test_create_with_unknown_format(self, client, wave_skill_data):
        wave_skill_data['Format'] = 'yaml'
        assert client.post('/api/skills', json=wave_skill_data).status_code == 400

    def test_list(self, client, wave_skill_data):
        assert client.get('/api/skills').json() == []
        skill_id = create_wave(client, wave_skill_data)
        summaries = client.get('/api/skills').json()
        assert len(summaries) == 1
        assert summaries[0]['id'] == skill_id
        assert summaries[0]['name'] == 'Wave Hello'
        assert set(summaries[0]) == {'id', 'name', 'description', 'exportDate', 'format', 'author'}

    def test_get_unknown(self, client):
        response = client.get('/api/skills/nope_1')
        assert response.status_code == 404
        assert response.json() == {'error': 'Skill not found'}

    def test_delete(self, client, wave_skill_data, export_dir):
        skill_id = create_wave(client, wave_skill_data)
        assert client.delete(f'/api/skills/{skill_id}').json() == {'message': 'Skill deleted successfully'}
        assert client.get(f'/api/skills/{skill_id}').status_code == 404
        assert not any(p.name.startswith(skill_id) for p in export_dir.iterdir())
        assert client.delete(f'/api/skills/{skill_id}').status_code == 404


class TestPositions:

    def test_add_get_delete(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        response = client.post(
            f'/api/skills/{skill_id}/positions',
            json={'name': 'Wave Up', 'positions': {'Right_Shoulder': 170}},
        )
        assert response.status_code == 201
        assert response.json() == {'message': 'Position added successfully', 'name': 'Wave Up'}

        positions = client.get(f'/api/skills/{skill_id}/positions').json()
        assert positions['Wave Up'] == {'Right_Shoulder': 170}
        assert len(positions) == 3

        response = client.delete(f"/api/skills/{skill_id}/positions/{quote('Wave Up')}")
        assert response.status_code == 200
        assert 'Wave Up' not in client.get(f'/api/skills/{skill_id}/positions').json()

    def test_add_missing_fields(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        response = client.post(f'/api/skills/{skill_id}/positions', json={'name': 'Empty'})
        assert response.status_code == 400

    def test_add_empty_vector(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        response = client.post(f'/api/skills/{skill_id}/positions', json={'name': 'Rest', 'positions': {}})
        assert response.status_code == 201
        assert client.get(f'/api/skills/{skill_id}/positions').json()['Rest'] == {}

    def test_add_to_unknown_skill(self, client):
        response = client.post('/api/skills/nope_1/positions', json={'name': 'P', 'positions': {'Waist': 1}})
        assert response.status_code == 404

    def test_delete_missing_position(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        response = client.delete(f'/api/skills/{skill_id}/positions/Nope')
        assert response.status_code == 404
        assert response.json() == {'error': 'Position not found'}


class TestDownloads:

    def test_download_uses_stored_format(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        response = client.get(f'/api/download/{skill_id}')
        assert response.status_code == 200
        assert 'attachment' in response.headers['content-disposition']
        assert 'Wave_Hello.arcskill' in response.headers['content-disposition']
        package = response.json()
        assert package['ServoConfiguration']['D5']['DefaultPosition'] == 45

    def test_download_reflects_new_position(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        client.post(f'/api/skills/{skill_id}/positions', json={'name': 'Bow', 'positions': {'Torso': 120}})
        package = client.get(f'/api/download/{skill_id}').json()
        assert 'Bow' in package['SavedPositions']
        assert package['SavedPositions']['Bow']['ServoPositions'] == {'D15': 120}

    def test_download_unknown(self, client):
        assert client.get('/api/download/nope_1').status_code == 404

    def test_arc_export_and_download(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        body = client.post(f'/api/export/arc/{skill_id}').json()
        assert body['success'] is True
        assert body['downloadUrl'] == f"/api/download/arc/{body['filename']}"

        response = client.get(body['downloadUrl'])
        assert response.status_code == 200
        assert response.headers['content-type'] == 'application/octet-stream'
        assert json.loads(response.content)['SkillName'] == 'Wave Hello'

    def test_arc_export_unknown(self, client):
        assert client.post('/api/export/arc/nope_1').status_code == 404

    def test_arc_download_requires_arc_file(self, client, wave_skill_data):
        create_wave(client, wave_skill_data)
        body = client.post('/api/export/database', json={'format': 'json'}).json()
        response = client.get(f"/api/download/arc/{body['filename']}")
        assert response.status_code == 404
        assert response.json() == {'error': 'ARC skill package not found'}

    def test_database_export_csv(self, client, wave_skill_data):
        create_wave(client, wave_skill_data)
        body = client.post('/api/export/database', json={'format': 'csv'}).json()
        assert body['filename'].startswith('database_export_')
        assert body['filename'].endswith('.csv')

        response = client.get(body['downloadUrl'])
        assert response.status_code == 200
        assert response.headers['content-type'].startswith('text/csv')
        lines = response.text.splitlines()
        assert lines[0] == '"ID","Name","Description","Author","ExportDate","Format"'
        assert '"Wave Hello"' in lines[1]

    def test_database_export_defaults(self, client, wave_skill_data):
        create_wave(client, wave_skill_data)
        body = client.post('/api/export/database').json()
        assert body['filename'].endswith('.json')
        skills = client.get(body['downloadUrl']).json()['skills']
        assert 'SavedPositions' not in skills[0]

    def test_database_export_without_store(self, client):
        response = client.post('/api/export/database', json={'format': 'json'})
        assert response.status_code == 404
        assert response.json() == {'error': 'No database found'}

    def test_database_export_bad_format(self, client):
        assert client.post('/api/export/database', json={'format': 'pdf'}).status_code == 400

    def test_database_download_rejects_other_files(self, client, wave_skill_data):
        skill_id = create_wave(client, wave_skill_data)
        filename = client.post(f'/api/export/arc/{skill_id}').json()['filename']
        assert client.get(f'/api/download/database/{filename}').status_code == 404


class TestDOF:

    def test_convert(self, client):
        mocap = {'landmarks': {'0': {'x': 1.0, 'y': 0.5, 'z': 0}, '13': {'x': 0.5, 'y': 0.5, 'z': -1.0}}}
        body = client.post('/api/dof/convert', json={'mocapData': mocap}).json()
        assert body['success'] is True
        assert len(body['dofData']) == 28
        assert body['dofData']['Head_Pan'] == 150
        assert body['dofData']['Left_Elbow'] == 150
        assert body['dofData']['Right_Shoulder'] == 90

    def test_convert_empty_landmarks(self, client):
        body = client.post('/api/dof/convert', json={'mocapData': {'landmarks': {}}}).json()
        assert all(v == 90 for v in body['dofData'].values())

    def test_convert_invalid(self, client):
        response = client.post('/api/dof/convert', json={'mocapData': {}})
        assert response.status_code == 400
        assert response.json() == {'error': 'Invalid mocap data format'}
        assert client.post('/api/dof/convert', json={}).status_code == 400

    def test_export_and_download(self, client):
        request = {
            'dofData': {'Head_Pan': 90, 'Left_Knee': 60},
            'metadata': {'name': 'Squat', 'frameRate': 24, 'loop': True},
            'format': 'xml',
        }
        body = client.post('/api/dof/export', json=request).json()
        assert body['success'] is True
        assert body['filename'].startswith('Squat_')
        assert body['downloadUrl'] == f"/api/dof/download/{body['filename']}"

        response = client.get(body['downloadUrl'])
        assert response.status_code == 200
        assert response.headers['content-type'].startswith('application/xml')
        assert '<ARCSkill>' in response.text
        assert '<FrameRate>24' in response.text
        assert '<LoopEnabled>true</LoopEnabled>' in response.text

    def test_export_empty_vector(self, client):
        response = client.post('/api/dof/export', json={'dofData': {}, 'format': 'json'})
        assert response.status_code == 200, response.text
        assert response.json()['success'] is True

    def test_export_missing_vector(self, client):
        response = client.post('/api/dof/export', json={'format': 'json'})
        assert response.status_code == 400
        assert response.json() == {'error': 'DOF data is required'}

    def test_export_unsupported_format(self, client):
        response = client.post('/api/dof/export', json={'dofData': {'Waist': 90}, 'format': 'yaml'})
        assert response.status_code == 500

    def test_download_missing(self, client):
        response = client.get('/api/dof/download/missing.json')
        assert response.status_code == 404
        assert response.json() == {'error': 'File not found'}

    def test_video_job(self, client):
        body = client.post('/api/dof/from-video/vid42').json()
        assert body['success'] is True
        assert body['estimatedTime'] == '2 minutes'

        status = client.get(f"/api/dof/status/{body['jobId']}").json()
        assert status['status'] == 'completed'
        assert status['progress'] == 100
        assert status['result']['videoId'] == 'vid42'

    def test_unknown_job(self, client):
        response = client.get('/api/dof/status/nope')
        assert response.status_code == 404
        assert response.json() == {'error': 'Job not found'}
