"""
User management endpoint tests.
"""
from booking.models import AuditLog, User


class TestProfile:

    def test_read_own_profile(self, client, patient, auth_headers):
        response = client.get('/api/users/profile', headers=auth_headers(patient))
        assert response.status_code == 200
        assert response.get_json()['data']['user']['email'] == patient.email

    def test_update_own_profile(self, client, patient, auth_headers):
        response = client.patch('/api/users/profile', json={'name': 'Renamed', 'phone': '555-0100'},
                                headers=auth_headers(patient))
        assert response.status_code == 200
        user = response.get_json()['data']['user']
        assert user['name'] == 'Renamed'
        assert user['phone'] == '555-0100'

    def test_specialization_ignored_for_patients(self, client, patient, auth_headers):
        response = client.patch('/api/users/profile', json={'specialization': 'Surgery'},
                                headers=auth_headers(patient))
        assert response.get_json()['data']['user']['specialization'] is None

    def test_other_profile_forbidden_for_non_admin(self, client, patient, other_patient, auth_headers):
        response = client.get(f'/api/users/{other_patient.id}', headers=auth_headers(patient))
        assert response.status_code == 403
        response = client.patch(f'/api/users/{other_patient.id}', json={'name': 'X'}, headers=auth_headers(patient))
        assert response.status_code == 403

    def test_admin_reads_and_updates_anyone(self, client, admin, doctor, auth_headers):
        assert client.get(f'/api/users/{doctor.id}', headers=auth_headers(admin)).status_code == 200
        response = client.patch(f'/api/users/{doctor.id}', json={'specialization': 'Neurology'},
                                headers=auth_headers(admin))
        assert response.get_json()['data']['user']['specialization'] == 'Neurology'

    def test_admin_gets_404_for_missing_user(self, client, admin, auth_headers):
        assert client.get('/api/users/99999', headers=auth_headers(admin)).status_code == 404


class TestChangePassword:

    def test_change_password(self, client, make_user, auth_headers):
        user = make_user('patient', email='cp@example.com', password='oldpass1')
        response = client.post('/api/users/change-password',
                               json={'current_password': 'oldpass1', 'new_password': 'newpass1'},
                               headers=auth_headers(user))
        assert response.status_code == 200
        login = client.post('/api/auth/login', json={'email': 'cp@example.com', 'password': 'newpass1'})
        assert login.status_code == 200

    def test_wrong_current_password(self, client, patient, auth_headers):
        response = client.post('/api/users/change-password',
                               json={'current_password': 'wrong', 'new_password': 'newpass1'},
                               headers=auth_headers(patient))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Current password is incorrect'

    def test_short_new_password(self, client, patient, auth_headers):
        response = client.post('/api/users/change-password',
                               json={'current_password': 'secret123', 'new_password': '123'},
                               headers=auth_headers(patient))
        assert response.status_code == 400


class TestAdminOperations:

    def test_list_users_requires_admin(self, client, patient, auth_headers):
        assert client.get('/api/users', headers=auth_headers(patient)).status_code == 403

    def test_list_users_filtered_by_role(self, client, admin, patient, other_patient, doctor, auth_headers):
        response = client.get('/api/users?role=patient', headers=auth_headers(admin))
        data = response.get_json()['data']
        assert {u['id'] for u in data['users']} == {patient.id, other_patient.id}
        assert data['pagination']['total_users'] == 2

    def test_deactivate_user(self, client, admin, patient, auth_headers):
        response = client.patch(f'/api/users/{patient.id}/status', json={'is_active': False},
                                headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.get_json()['message'] == 'User deactivated successfully'
        assert User.query.get(patient.id).is_active is False
        assert AuditLog.query.filter_by(entity_type='user', action='deactivate').count() == 1

    def test_admin_cannot_deactivate_self(self, client, admin, auth_headers):
        response = client.patch(f'/api/users/{admin.id}/status', json={'is_active': False},
                                headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cannot deactivate your own account'
        assert User.query.get(admin.id).is_active is True

    def test_is_active_must_be_boolean(self, client, admin, patient, auth_headers):
        response = client.patch(f'/api/users/{patient.id}/status', json={'is_active': 'no'},
                                headers=auth_headers(admin))
        assert response.status_code == 400


class TestDoctorDirectory:

    def test_filter_by_specialization(self, client, patient, make_user, auth_headers):
        cardio = make_user('doctor', name='Dr. Heart', specialization='Cardiology')
        make_user('doctor', name='Dr. Skin', specialization='Dermatology')
        response = client.get('/api/users/doctors?specialization=cardio', headers=auth_headers(patient))
        assert [d['id'] for d in response.get_json()['data']['doctors']] == [cardio.id]


class TestOutOfRangeUserIds:

    def test_admin_read_is_404(self, client, admin, auth_headers):
        assert client.get(f'/api/users/{10 ** 25}', headers=auth_headers(admin)).status_code == 404

    def test_admin_status_toggle_is_404(self, client, admin, auth_headers):
        response = client.patch(f'/api/users/{10 ** 25}/status', json={'is_active': False},
                                headers=auth_headers(admin))
        assert response.status_code == 404
