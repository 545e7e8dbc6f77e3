"""
Unit Tests for Authentication API Endpoints
"""
import pytest
from httpx import AsyncClient
from faker import Faker

from taskportal.models.user import UserRole

fake = Faker()


class TestStudentRegistration:
    """Test student registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_success(self, client: AsyncClient):
        """Registration returns a token and a generated student number"""
        user_data = {
            'name': fake.name(),
            'email': fake.unique.email(),
            'password': 'securePassword123',
            'category': 'Web Development',
        }

        response = await client.post('/api/v1/auth/student/register', json=user_data)

        assert response.status_code == 201
        data = response.json()
        assert data['access_token']
        assert data['token_type'] == 'bearer'
        assert data['user']['email'] == user_data['email'].lower()
        assert data['user']['role'] == 'student'
        assert data['user']['student_number'].startswith('S')
        assert 'hashed_password' not in data['user']

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, student_user):
        user_data = {
            'name': fake.name(),
            'email': student_user.email,
            'password': 'securePassword123',
            'category': 'Data Science',
        }

        response = await client.post('/api/v1/auth/student/register', json=user_data)

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'DUPLICATE_IDENTITY'

    @pytest.mark.asyncio
    async def test_register_invalid_email(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/student/register', json={
            'name': fake.name(),
            'email': 'not-an-email',
            'password': 'securePassword123',
            'category': 'Data Science',
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        response = await client.post('/api/v1/auth/student/register', json={
            'name': fake.name(),
            'email': fake.unique.email(),
            'password': '123',
            'category': 'Data Science',
        })

        assert response.status_code == 422


class TestLogin:
    """Test the role-specific login endpoints"""

    @pytest.mark.asyncio
    async def test_student_login(self, client: AsyncClient, student_user, user_password):
        response = await client.post('/api/v1/auth/student/login', json={
            'student_number': student_user.student_number,
            'password': user_password,
        })

        assert response.status_code == 200
        data = response.json()
        assert data['user']['id'] == student_user.id
        assert data['user']['last_login'] is not None

    @pytest.mark.asyncio
    async def test_student_login_wrong_password(self, client: AsyncClient, student_user):
        response = await client.post('/api/v1/auth/student/login', json={
            'student_number': student_user.student_number,
            'password': 'wrongpassword',
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_cannot_use_student_login(self, client: AsyncClient, admin_user, user_password):
        response = await client.post('/api/v1/auth/student/login', json={
            'student_number': admin_user.email,
            'password': user_password,
        })

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_login(self, client: AsyncClient, admin_user, user_password):
        response = await client.post('/api/v1/auth/admin/login', json={
            'email': admin_user.email,
            'password': user_password,
        })

        assert response.status_code == 200
        assert response.json()['user']['role'] == 'admin'

    @pytest.mark.asyncio
    async def test_inactive_student_login(self, client: AsyncClient, make_user, user_password):
        inactive = await make_user(UserRole.STUDENT, is_active=False)

        response = await client.post('/api/v1/auth/student/login', json={
            'student_number': inactive.student_number,
            'password': user_password,
        })

        assert response.status_code == 403


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, student_user, auth_headers):
        response = await client.get('/api/v1/auth/me', headers=auth_headers)

        assert response.status_code == 200
        assert response.json()['id'] == student_user.id

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer nope'})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_change_password(self, client: AsyncClient, student_user, auth_headers, user_password):
        response = await client.post('/api/v1/auth/change-password', headers=auth_headers, json={
            'current_password': user_password,
            'new_password': 'brandNew123',
        })
        assert response.status_code == 200

        login = await client.post('/api/v1/auth/student/login', json={
            'student_number': student_user.student_number,
            'password': 'brandNew123',
        })
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, client: AsyncClient, auth_headers):
        response = await client.post('/api/v1/auth/change-password', headers=auth_headers, json={
            'current_password': 'not-it',
            'new_password': 'brandNew123',
        })
        assert response.status_code == 401
