"""
Unit Tests for Admin API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from taskportal.models.user import UserRole

fake = Faker()


class TestAdminDashboard:

    @pytest.mark.asyncio
    async def test_dashboard(self, client: AsyncClient, admin_auth_headers, student_user, make_task):
        await make_task()

        response = await client.get('/api/v1/admin/dashboard', headers=admin_auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data['stats']['users']['student']['count'] == 1
        assert data['stats']['tasks']['not_started'] == 1
        assert data['stats']['categories'] == {'Web Development': 1}
        assert len(data['recent']['tasks']) == 1
        assert data['performance'][0]['student_id'] == student_user.id

    @pytest.mark.asyncio
    async def test_system_stats(self, client: AsyncClient, admin_auth_headers, student_user):
        response = await client.get('/api/v1/admin/stats', headers=admin_auth_headers)

        assert response.status_code == 200
        assert response.json()['users'] == {'total': 2, 'active': 2}

    @pytest.mark.asyncio
    async def test_student_forbidden(self, client: AsyncClient, auth_headers):
        response = await client.get('/api/v1/admin/dashboard', headers=auth_headers)
        assert response.status_code == 403


class TestStudentManagement:

    @pytest.mark.asyncio
    async def test_create_student(self, client: AsyncClient, admin_auth_headers):
        response = await client.post('/api/v1/admin/students', headers=admin_auth_headers, json={
            'name': fake.name(),
            'email': fake.unique.email(),
            'password': 'welcome123',
            'category': 'Mobile Development',
            'student_number': 's900',
        })

        assert response.status_code == 201
        assert response.json()['student_number'] == 'S900'
        assert response.json()['category'] == 'Mobile Development'

    @pytest.mark.asyncio
    async def test_duplicate_student_number(self, client: AsyncClient, admin_auth_headers, student_user):
        response = await client.post('/api/v1/admin/students', headers=admin_auth_headers, json={
            'name': fake.name(),
            'email': fake.unique.email(),
            'password': 'welcome123',
            'category': 'Mobile Development',
            'student_number': student_user.student_number,
        })

        assert response.status_code == 400
        assert response.json()['error']['details']['field'] == 'student_number'

    @pytest.mark.asyncio
    async def test_bulk_create_reports_bad_rows(self, client: AsyncClient, admin_auth_headers, student_user):
        good_email = fake.unique.email()
        response = await client.post('/api/v1/admin/students/bulk', headers=admin_auth_headers, json={
            'students': [
                {'name': 'Ada', 'email': good_email, 'password': 'welcome123', 'category': 'Data Science'},
                {'name': 'Copy', 'email': student_user.email, 'password': 'welcome123',
                 'category': 'Data Science'},
                {'name': 'Short', 'email': fake.unique.email(), 'password': '123', 'category': 'Data Science'},
                {'name': 'Grace', 'email': fake.unique.email(), 'password': 'welcome123',
                 'category': 'UI/UX Design'},
            ]
        })

        assert response.status_code == 200
        data = response.json()
        assert data['created'] == 2
        assert data['errors'] == 2
        assert [f['index'] for f in data['failures']] == [1, 2]
        assert data['failures'][0]['email'] == student_user.email
        assert data['failures'][1]['reason'].startswith('password')

        listing = await client.get('/api/v1/admin/students', headers=admin_auth_headers)
        assert listing.json()['total'] == 3
        assert good_email.lower() in [s['email'] for s in listing.json()['items']]

    @pytest.mark.asyncio
    async def test_bulk_create_requires_admin(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/admin/students/bulk', headers=auth_headers, json={
            'students': [{'name': 'Ada', 'email': 'ada@example.com', 'password': 'welcome123',
                          'category': 'Data Science'}]
        })
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_students_filters(self, client: AsyncClient, admin_auth_headers, student_user,
                                         other_student, make_user):
        await make_user(UserRole.STUDENT, is_active=False)

        response = await client.get(
            '/api/v1/admin/students', headers=admin_auth_headers, params={'category': 'Data Science'}
        )
        assert [s['id'] for s in response.json()['items']] == [other_student.id]

        response = await client.get(
            '/api/v1/admin/students', headers=admin_auth_headers, params={'is_active': 'false'}
        )
        assert response.json()['total'] == 1

    @pytest.mark.asyncio
    async def test_deactivate_student_blocks_access(self, client: AsyncClient, admin_auth_headers,
                                                    student_user, auth_headers):
        response = await client.patch(
            f'/api/v1/admin/students/{student_user.id}/status',
            headers=admin_auth_headers,
            json={'is_active': False},
        )
        assert response.status_code == 200
        assert response.json()['is_active'] is False

        response = await client.get('/api/v1/auth/me', headers=auth_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_status_of_admin_is_not_found(self, client: AsyncClient, admin_auth_headers, admin_user):
        response = await client.patch(
            f'/api/v1/admin/students/{admin_user.id}/status',
            headers=admin_auth_headers,
            json={'is_active': False},
        )
        assert response.status_code == 404


class TestAdminProfile:

    @pytest.mark.asyncio
    async def test_update_profile(self, client: AsyncClient, admin_auth_headers):
        response = await client.patch('/api/v1/admin/profile', headers=admin_auth_headers, json={'name': 'Head Admin'})

        assert response.status_code == 200
        assert response.json()['name'] == 'Head Admin'

        response = await client.get('/api/v1/admin/profile', headers=admin_auth_headers)
        assert response.json()['name'] == 'Head Admin'
