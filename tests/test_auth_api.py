"""
Authentication endpoint tests: registration, login and token handling.
"""
from datetime import timedelta

from flask_jwt_extended import create_access_token

from booking.extensions import db


def _register(client, **overrides):
    body = {'name': 'Ann Patient', 'email': 'ann@example.com', 'password': 'secret123'}
    body.update(overrides)
    return client.post('/api/auth/register', json=body)


class TestRegister:

    def test_register_patient(self, client):
        response = _register(client)
        assert response.status_code == 201
        payload = response.get_json()
        assert payload['status'] == 'success'
        assert payload['data']['user']['role'] == 'patient'
        assert payload['data']['token']
        assert 'password_hash' not in payload['data']['user']

    def test_register_doctor_with_specialization(self, client):
        response = _register(client, email='dra@example.com', role='doctor', specialization='Cardiology')
        assert response.status_code == 201
        assert response.get_json()['data']['user']['specialization'] == 'Cardiology'

    def test_duplicate_email_is_case_insensitive(self, client):
        _register(client)
        response = _register(client, email='ANN@Example.com')
        assert response.status_code == 400
        assert response.get_json() == {'status': 'error', 'message': 'User with this email already exists'}

    def test_self_registration_as_admin_is_refused(self, client):
        response = _register(client, role='admin')
        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'

    def test_validation_errors_are_listed(self, client):
        response = _register(client, email='bad', password='123')
        assert response.status_code == 400
        payload = response.get_json()
        assert payload['message'] == 'Validation failed'
        assert len(payload['errors']) == 2

    def test_non_json_body(self, client):
        response = client.post('/api/auth/register', data='name=ann')
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Request body must be JSON'


class TestLogin:

    def test_login_returns_token(self, client, make_user):
        make_user('patient', email='p@example.com', password='secret123')
        response = client.post('/api/auth/login', json={'email': 'P@example.com', 'password': 'secret123'})
        assert response.status_code == 200
        assert response.get_json()['data']['token']

    def test_wrong_password(self, client, make_user):
        make_user('patient', email='p@example.com', password='secret123')
        response = client.post('/api/auth/login', json={'email': 'p@example.com', 'password': 'nope'})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid email or password'

    def test_unknown_email(self, client):
        response = client.post('/api/auth/login', json={'email': 'ghost@example.com', 'password': 'secret123'})
        assert response.status_code == 401

    def test_missing_fields(self, client):
        response = client.post('/api/auth/login', json={'email': 'p@example.com'})
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Email and password are required'

    def test_deactivated_account(self, client, make_user):
        make_user('patient', email='p@example.com', password='secret123', is_active=False)
        response = client.post('/api/auth/login', json={'email': 'p@example.com', 'password': 'secret123'})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Account is deactivated'


class TestTokens:

    def test_me(self, client, patient, auth_headers):
        response = client.get('/api/auth/me', headers=auth_headers(patient))
        assert response.status_code == 200
        assert response.get_json()['data']['user']['id'] == patient.id

    def test_missing_token(self, client):
        response = client.get('/api/auth/me')
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Access token is required'

    def test_malformed_token(self, client):
        response = client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid token'

    def test_expired_token(self, client, patient):
        token = create_access_token(identity=str(patient.id), expires_delta=timedelta(seconds=-1))
        response = client.get('/api/auth/me', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Token has expired'

    def test_token_of_deactivated_user(self, client, patient, auth_headers):
        headers = auth_headers(patient)
        patient.is_active = False
        db.session.commit()
        response = client.get('/api/auth/me', headers=headers)
        assert response.status_code == 401
        assert response.get_json()['message'] == 'User not found or inactive'

    def test_refresh(self, client, patient, auth_headers):
        response = client.post('/api/auth/refresh', headers=auth_headers(patient))
        assert response.status_code == 200
        assert response.get_json()['data']['token']

    def test_logout(self, client, patient, auth_headers):
        response = client.post('/api/auth/logout', headers=auth_headers(patient))
        assert response.status_code == 200
        assert response.get_json()['status'] == 'success'


class TestLongPasswords:
    """Passwords beyond bcrypt's 72-byte input limit."""

    def test_register_and_login_with_long_password(self, client):
        password = 'x' * 100
        response = _register(client, password=password)
        assert response.status_code == 201

        login = client.post('/api/auth/login', json={'email': 'ann@example.com', 'password': password})
        assert login.status_code == 200

    def test_long_passwords_differing_after_72_bytes_are_distinct(self, client):
        _register(client, password='x' * 100)
        response = client.post('/api/auth/login', json={'email': 'ann@example.com', 'password': 'x' * 99 + 'y'})
        assert response.status_code == 401

    def test_long_wrong_password_is_rejected(self, client, make_user):
        make_user('patient', email='p@example.com', password='secret123')
        response = client.post('/api/auth/login', json={'email': 'p@example.com', 'password': 'y' * 100})
        assert response.status_code == 401
        assert response.get_json()['message'] == 'Invalid email or password'
