import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from conftest import add_school, add_user
from school_api.routes.school_routes import (
    CreateSchoolRequest,
    UpdateSchoolRequest,
    create_school,
    delete_school,
    get_school,
    update_school,
)

SCHOOL_PAYLOAD = {
    'name': 'North High',
    'address': '1 Main St',
    'contact': '555-0100',
    'description': 'Public high school',
}


def test_create_school_request_rejects_blank_name() -> None:
    with pytest.raises(ValidationError):
        CreateSchoolRequest(**{**SCHOOL_PAYLOAD, 'name': '   '})


def test_create_school_links_admin_users(db) -> None:
    admin = add_user(db, email='principal@example.com')

    school = create_school(CreateSchoolRequest(**SCHOOL_PAYLOAD, admins=[admin.id]), db=db)

    assert school.id is not None
    assert [user.id for user in school.admins] == [admin.id]


def test_create_school_rejects_unknown_admin_ids(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_school(CreateSchoolRequest(**SCHOOL_PAYLOAD, admins=[41, 42]), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail['error'] == 'Unknown admin user ids: [41, 42]'


def test_update_school_applies_partial_changes(db) -> None:
    school = add_school(db, name='Old Name')

    updated = update_school(school.id, UpdateSchoolRequest(name='New Name'), db=db)

    assert updated.name == 'New Name'
    assert updated.address == '1 Main St'


def test_update_school_returns_404_for_missing_school(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_school(999, UpdateSchoolRequest(name='Nope'), db=db)

    assert exception_info.value.status_code == 404


def test_delete_school_twice_returns_404(db) -> None:
    school = add_school(db)

    delete_school(school.id, db=db)

    with pytest.raises(HTTPException) as exception_info:
        get_school(school.id, db=db)
    assert exception_info.value.status_code == 404

    with pytest.raises(HTTPException) as exception_info:
        delete_school(school.id, db=db)
    assert exception_info.value.status_code == 404


def test_get_missing_school_over_http_returns_message(client, auth_headers) -> None:
    response = client.get('/api/schools/999', headers=auth_headers())

    assert response.status_code == 404
    assert response.json() == {'message': 'School not found'}


def test_school_crud_over_http(client, auth_headers) -> None:
    headers = auth_headers(role='superadmin')

    created = client.post('/api/schools/', json=SCHOOL_PAYLOAD, headers=headers)
    assert created.status_code == 201
    school_id = created.json()['id']

    listed = client.get('/api/schools/', headers=headers)
    assert [school['id'] for school in listed.json()] == [school_id]

    updated = client.put(f'/api/schools/{school_id}', json={'contact': '555-0199'}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()['contact'] == '555-0199'

    deleted = client.delete(f'/api/schools/{school_id}', headers=headers)
    assert deleted.json() == {'message': 'School deleted successfully'}

    deleted_again = client.delete(f'/api/schools/{school_id}', headers=headers)
    assert deleted_again.status_code == 404


def test_school_collection_answers_without_trailing_slash(client, auth_headers) -> None:
    headers = auth_headers()

    created = client.post('/api/schools', json=SCHOOL_PAYLOAD, headers=headers, follow_redirects=False)
    assert created.status_code == 201

    listed = client.get('/api/schools', headers=headers, follow_redirects=False)
    assert listed.status_code == 200
    assert [school['name'] for school in listed.json()] == ['North High']


def test_out_of_range_school_id_over_http_returns_404(client, auth_headers) -> None:
    response = client.delete('/api/schools/99999999999999999999999', headers=auth_headers())

    assert response.status_code == 404
    assert response.json() == {'message': 'School not found'}


def test_create_school_request_rejects_out_of_range_admin_ids() -> None:
    with pytest.raises(ValidationError):
        CreateSchoolRequest(**SCHOOL_PAYLOAD, admins=[99999999999999999999999])
