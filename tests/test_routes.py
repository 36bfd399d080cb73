"""API tests through the Flask test client."""
import pytest

from app.models import AuditLog


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def registered(client):
    """A self-registered patient: (response json, access headers)."""
    response = client.post('/api/auth/register', json={
        'email': 'self@patients.test',
        'password': 'Str0ngPass!',
        'first_name': 'Self',
        'last_name': 'Booker',
    })
    assert response.status_code == 201
    body = response.get_json()
    return body, bearer(body['access_token'])


# ============================================================================
# PLUMBING
# ============================================================================


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json()['service'] == 'clinic-booking'
    assert client.get('/health/ready').get_json()['database'] == 'connected'


def test_security_headers_outside_debug(app, client):
    app.debug = False

    headers = client.get('/health/live').headers

    assert headers['X-Frame-Options'] == 'DENY'
    assert headers['X-Content-Type-Options'] == 'nosniff'
    assert 'Strict-Transport-Security' not in headers


def test_missing_token_is_401(client):
    response = client.get('/api/appointments')

    assert response.status_code == 401
    assert response.get_json() == {'success': False, 'error': 'Authentication required'}


def test_unknown_endpoint_is_404(client):
    response = client.get('/api/nothing-here')

    assert response.status_code == 404
    assert response.get_json()['success'] is False


# ============================================================================
# AUTH
# ============================================================================


def test_login_refresh_logout(client, make_user):
    user = make_user('receptionist', email='desk@clinic.test', password='DeskPass123')

    login = client.post('/api/auth/login', json={'email': 'desk@clinic.test', 'password': 'DeskPass123'})
    assert login.status_code == 200
    tokens = login.get_json()

    refreshed = client.post('/api/auth/refresh', headers=bearer(tokens['refresh_token']))
    assert refreshed.status_code == 200
    assert client.post('/api/auth/refresh', headers=bearer(tokens['refresh_token'])).status_code == 401

    me = client.get('/api/auth/me', headers=bearer(refreshed.get_json()['access_token']))
    assert me.get_json()['data']['id'] == user.id

    logout = client.post('/api/auth/logout', headers=bearer(tokens['access_token']))
    assert logout.status_code == 200
    assert client.post('/api/auth/refresh',
                       headers=bearer(refreshed.get_json()['refresh_token'])).status_code == 401


def test_login_with_bad_password(client, make_user):
    make_user('admin', email='boss@clinic.test')

    response = client.post('/api/auth/login', json={'email': 'boss@clinic.test', 'password': 'nope'})

    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid email or password'


def test_me_includes_patient_profile(client, registered):
    body, headers = registered

    data = client.get('/api/auth/me', headers=headers).get_json()['data']

    assert data['role'] == 'patient'
    assert data['patient']['email'] == 'self@patients.test'


# ============================================================================
# APPOINTMENTS
# ============================================================================


def test_patient_books_and_cancels_own_appointment(client, registered, doctor):
    body, headers = registered

    created = client.post('/api/appointments', headers=headers, json={
        'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '10:00', 'reason': 'Checkup',
    })
    assert created.status_code == 201
    appointment = created.get_json()['data']
    assert appointment['status'] == 'scheduled'
    assert appointment['patient_id'] == body['data']['patient_id']
    assert appointment['doctor_name'] == doctor.full_name

    overlap = client.post('/api/appointments', headers=headers, json={
        'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '10:15',
    })
    assert overlap.status_code == 409
    assert overlap.get_json()['error'] == 'Doctor has a scheduling conflict at this time'

    listed = client.get('/api/appointments', headers=headers).get_json()
    assert listed['count'] == 1

    cancelled = client.post(f"/api/appointments/{appointment['id']}/cancel", headers=headers,
                            json={'reason': 'Travelling'})
    assert cancelled.status_code == 200
    assert cancelled.get_json()['data']['cancellation_reason'] == 'Travelling'

    actions = [entry.action for entry in AuditLog.query.filter_by(entity_type='appointment').all()]
    assert actions == ['create', 'cancel']


def test_patient_cannot_touch_other_patients(client, registered, make_patient, doctor, receptionist_headers):
    _, headers = registered
    other = make_patient()

    booked = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': other.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '11:00',
    })
    assert booked.status_code == 201
    appointment_id = booked.get_json()['data']['id']

    assert client.get(f'/api/appointments/{appointment_id}', headers=headers).status_code == 403
    assert client.post(f'/api/appointments/{appointment_id}/cancel', headers=headers).status_code == 403
    assert client.get(f'/api/patients/{other.id}', headers=headers).status_code == 403
    assert client.post('/api/appointments', headers=headers, json={
        'patient_id': other.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '12:00',
    }).status_code == 403


def test_staff_lifecycle(client, receptionist_headers, patient, doctor):
    created = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '09:00',
        'duration_minutes': 45,
    }).get_json()['data']
    url = f"/api/appointments/{created['id']}"

    assert client.post(f'{url}/confirm', headers=receptionist_headers).get_json()['data']['status'] == 'confirmed'
    assert client.post(f'{url}/start', headers=receptionist_headers).get_json()['data']['status'] == 'in_progress'
    assert client.post(f'{url}/complete', headers=receptionist_headers).get_json()['data']['status'] == 'completed'

    response = client.post(f'{url}/cancel', headers=receptionist_headers)
    assert response.status_code == 409
    assert response.get_json()['error'] == 'Cannot cancel a completed appointment'


def test_update_appointment(client, receptionist_headers, patient, doctor):
    created = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '09:00',
    }).get_json()['data']

    response = client.put(f"/api/appointments/{created['id']}", headers=receptionist_headers, json={
        'date': '2024-01-11', 'time': '14:30', 'notes': 'Moved by phone',
    })

    assert response.status_code == 200
    data = response.get_json()['data']
    assert (data['appointment_date'], data['appointment_time'], data['status']) == ('2024-01-11', '14:30', 'scheduled')
    assert data['duration_minutes'] == 30


def test_appointment_validation_errors(client, receptionist_headers, patient, doctor):
    bad_date = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '10/01/2024', 'time': '09:00',
    })
    assert bad_date.status_code == 400
    assert bad_date.get_json()['error'] == 'Invalid date. Use YYYY-MM-DD'

    past = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '2024-01-08', 'time': '09:00',
    })
    assert past.status_code == 400

    missing = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': 999, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '09:00',
    })
    assert missing.status_code == 404

    assert client.get('/api/appointments/12345', headers=receptionist_headers).status_code == 404
    assert client.post('/api/appointments', headers=receptionist_headers, data='x').status_code == 400


@pytest.mark.parametrize('field,value,error', [
    ('reason', 123, 'Reason must be a string'),
    ('notes', ['call back'], 'Notes must be a string'),
    ('duration_minutes', 30.5, 'Invalid duration_minutes. Must be an integer'),
])
def test_appointment_body_types(client, receptionist_headers, patient, doctor, field, value, error):
    payload = {'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '09:00'}
    payload[field] = value

    response = client.post('/api/appointments', headers=receptionist_headers, json=payload)

    assert response.status_code == 400
    assert response.get_json()['error'] == error
    assert client.get('/api/appointments', headers=receptionist_headers).get_json()['count'] == 0


def test_whole_float_duration_is_accepted(client, receptionist_headers, patient, doctor):
    response = client.post('/api/appointments', headers=receptionist_headers, json={
        'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '09:00',
        'duration_minutes': 45.0,
    })

    assert response.status_code == 201
    assert response.get_json()['data']['duration_minutes'] == 45


def test_update_validates_body_before_lookup(client, receptionist_headers):
    response = client.put('/api/appointments/9999', headers=receptionist_headers, json={
        'date': 'tomorrow', 'time': '09:00',
    })
    assert response.status_code == 400

    response = client.put('/api/appointments/9999', headers=receptionist_headers, json={
        'date': '2024-01-10', 'time': '09:00',
    })
    assert response.status_code == 404


def test_delete_appointment_requires_admin_or_receptionist(client, make_user, auth_headers, admin_headers,
                                                          patient, doctor):
    doctor_headers = auth_headers(make_user('doctor', doctor_id=doctor.id))
    created = client.post('/api/appointments', headers=admin_headers, json={
        'patient_id': patient.id, 'doctor_id': doctor.id, 'date': '2024-01-10', 'time': '09:00',
    }).get_json()['data']
    url = f"/api/appointments/{created['id']}"

    assert client.delete(url, headers=doctor_headers).status_code == 403
    assert client.delete(url, headers=admin_headers).status_code == 200
    assert client.delete(url, headers=admin_headers).status_code == 404


# ============================================================================
# DOCTORS
# ============================================================================


def test_doctor_administration(client, admin_headers, receptionist_headers):
    payload = {'first_name': 'Helen', 'last_name': 'Taussig', 'email': 'helen@heart.test',
               'specialization': 'Cardiology'}

    assert client.post('/api/doctors', headers=receptionist_headers, json=payload).status_code == 403

    created = client.post('/api/doctors', headers=admin_headers, json=payload)
    assert created.status_code == 201
    doctor_id = created.get_json()['data']['id']

    duplicate = client.post('/api/doctors', headers=admin_headers, json=payload)
    assert duplicate.status_code == 409

    availability = client.get(f'/api/doctors/{doctor_id}/availability?date=2024-01-10',
                              headers=receptionist_headers).get_json()
    assert availability['count'] == 16

    toggled = client.put(f'/api/doctors/{doctor_id}/availability', headers=admin_headers,
                         json={'is_available': False})
    assert toggled.get_json()['data']['is_available'] is False
    assert client.get(f'/api/doctors/{doctor_id}/availability?date=2024-01-10',
                      headers=receptionist_headers).get_json()['count'] == 0


def test_doctor_can_only_toggle_own_availability(client, make_user, auth_headers, make_doctor):
    own, other = make_doctor(), make_doctor()
    headers = auth_headers(make_user('doctor', doctor_id=own.id))

    assert client.put(f'/api/doctors/{own.id}/availability', headers=headers,
                      json={'is_available': False}).status_code == 200
    assert client.put(f'/api/doctors/{other.id}/availability', headers=headers,
                      json={'is_available': False}).status_code == 403


# ============================================================================
# TIME SLOTS
# ============================================================================


def test_time_slot_administration(client, receptionist_headers, registered, doctor):
    _, patient_headers = registered

    forbidden = client.post('/api/time-slots/bulk', headers=patient_headers, json={
        'doctor_id': doctor.id, 'date': '2024-01-10', 'start_time': '09:00', 'end_time': '10:00',
    })
    assert forbidden.status_code == 403

    single = client.post('/api/time-slots', headers=receptionist_headers, json={
        'doctor_id': doctor.id, 'start_time': '2024-01-10T09:00:00Z', 'end_time': '2024-01-10T09:30:00Z',
    })
    assert single.status_code == 201

    bulk = client.post('/api/time-slots/bulk', headers=receptionist_headers, json={
        'doctor_id': doctor.id, 'date': '2024-01-10', 'start_time': '09:00', 'end_time': '10:00',
        'slot_minutes': 30,
    })
    assert bulk.status_code == 201
    assert bulk.get_json()['count'] == 1
    assert bulk.get_json()['data'][0]['start_time'] == '2024-01-10T09:30:00'

    listed = client.get(f'/api/time-slots?doctor_id={doctor.id}&date=2024-01-10', headers=patient_headers)
    assert listed.get_json()['count'] == 2

    slot_id = single.get_json()['data']['id']
    blocked = client.post(f'/api/time-slots/{slot_id}/block', headers=receptionist_headers,
                          json={'reason': 'Staff meeting'})
    assert blocked.get_json()['data']['is_blocked'] is True

    available = client.get(f'/api/time-slots/doctor/{doctor.id}/available?date=2024-01-10',
                           headers=patient_headers).get_json()
    assert [slot['start_time'] for slot in available['data']] == ['2024-01-10T09:30:00']

    deleted = client.delete(f'/api/time-slots/doctor/{doctor.id}/date/2024-01-10', headers=receptionist_headers)
    assert deleted.get_json()['data']['deleted'] == 2
    assert client.get(f'/api/time-slots/{slot_id}', headers=receptionist_headers).status_code == 404


def test_time_slot_conflict_and_validation(client, receptionist_headers, doctor):
    payload = {'doctor_id': doctor.id, 'start_time': '2024-01-10T09:00:00', 'end_time': '2024-01-10T10:00:00'}
    assert client.post('/api/time-slots', headers=receptionist_headers, json=payload).status_code == 201
    assert client.post('/api/time-slots', headers=receptionist_headers, json=payload).status_code == 409

    short = dict(payload, start_time='2024-01-11T09:00:00', end_time='2024-01-11T09:05:00')
    response = client.post('/api/time-slots', headers=receptionist_headers, json=short)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Time slot must be at least 15 minutes'

    slot_id = client.get('/api/time-slots', headers=receptionist_headers).get_json()['data'][0]['id']
    blocked = client.post(f'/api/time-slots/{slot_id}/block', headers=receptionist_headers,
                          json={'reason': {'why': 'leave'}})
    assert blocked.status_code == 400
    assert blocked.get_json()['error'] == 'Block reason must be a string'
    slot = client.get(f'/api/time-slots/{slot_id}', headers=receptionist_headers).get_json()['data']
    assert slot['is_blocked'] is False


# ============================================================================
# PATIENTS
# ============================================================================


def test_patient_endpoints(client, registered, receptionist_headers, admin_headers):
    body, headers = registered
    patient_id = body['data']['patient_id']

    profile = client.put(f'/api/patients/{patient_id}/profile', headers=headers, json={
        'first_name': 'Self', 'last_name': 'Booker', 'phone': '555-0101', 'date_of_birth': '1990-05-01',
        'city': 'Lisbon',
    })
    assert profile.status_code == 200
    assert profile.get_json()['data']['is_profile_complete'] is True

    fetched = client.get(f'/api/patients/{patient_id}', headers=headers).get_json()['data']
    assert fetched['age'] == 33
    assert fetched['city'] == 'Lisbon'

    assert client.get('/api/patients', headers=headers).status_code == 403
    listing = client.get('/api/patients?search=booker', headers=receptionist_headers).get_json()
    assert listing['pagination']['total'] == 1

    assert client.delete(f'/api/patients/{patient_id}', headers=receptionist_headers).status_code == 403
    assert client.delete(f'/api/patients/{patient_id}', headers=admin_headers).status_code == 200
