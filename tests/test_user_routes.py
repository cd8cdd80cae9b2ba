"""
Tests for staff user management and per-user role assignment.
"""
import pytest

from ecommerce_admin.constants import StatusCode
from ecommerce_admin.models import ApiToken, User, db


@pytest.fixture
def staff(make_user):
    return make_user('staff@example.com', username='staffer', roles=['Sales'])


class TestUserListing:
    def test_list_users(self, client, admin_headers, staff):
        response = client.get('/api/v1/users?sort_by=email', headers=admin_headers)
        users = response.get_json()["data"]["users"]

        assert [u["email"] for u in users] == ["staff@example.com", "admin@example.com"]
        assert "password_hash" not in users[0]
        assert users[0]["roles"] == ["Sales"]

    def test_search_and_role_filter(self, client, admin_headers, staff):
        searched = client.get('/api/v1/users?search=staffer', headers=admin_headers)
        by_role = client.get('/api/v1/users?role=Sales', headers=admin_headers)

        assert [u["id"] for u in searched.get_json()["data"]["users"]] == [staff.id]
        assert [u["id"] for u in by_role.get_json()["data"]["users"]] == [staff.id]

    def test_trashed_listing(self, client, admin_headers, staff):
        staff.soft_delete()
        db.session.commit()

        live = client.get('/api/v1/users', headers=admin_headers).get_json()["data"]["users"]
        trashed = client.get('/api/v1/users/trashed', headers=admin_headers).get_json()["data"]["users"]

        assert staff.id not in [u["id"] for u in live]
        assert [u["id"] for u in trashed] == [staff.id]


class TestUserWrites:
    def test_create_user(self, client, admin_headers):
        response = client.post('/api/v1/users', headers=admin_headers, json={
            "username": "newbie", "email": "New@Example.com", "password": "supersecret", "roles": ["Support"],
        })
        data = response.get_json()

        assert response.status_code == 201
        assert data["status_code"] == int(StatusCode.CREATED_USER_SUCCESSFULLY)
        assert data["data"]["email"] == "new@example.com"
        assert data["data"]["roles"] == ["Support"]
        assert User.query.filter_by(email="new@example.com").one().check_password("supersecret")

    def test_create_validation(self, client, admin_headers, staff):
        response = client.post('/api/v1/users', headers=admin_headers, json={
            "username": "ab", "email": "staff@example.com", "password": "short",
        })
        errors = response.get_json()["errors"]

        assert response.status_code == 422
        assert "username" in errors and "password" in errors

    def test_duplicate_email(self, client, admin_headers, staff):
        response = client.post('/api/v1/users', headers=admin_headers, json={
            "username": "another", "email": "STAFF@example.com", "password": "supersecret",
        })

        assert response.status_code == 422
        assert response.get_json()["errors"]["email"] == ["The email has already been taken."]

    def test_unknown_role(self, client, admin_headers):
        response = client.post('/api/v1/users', headers=admin_headers, json={
            "username": "newbie", "email": "new@example.com", "password": "supersecret", "roles": ["Wizard"],
        })

        assert response.status_code == 422
        assert "roles" in response.get_json()["errors"]

    def test_non_admin_cannot_create_admin(self, client, headers_for):
        headers = headers_for('create users', email='hr@example.com')

        response = client.post('/api/v1/users', headers=headers, json={
            "username": "boss", "email": "boss@example.com", "password": "supersecret", "is_admin": True,
        })

        assert response.status_code == 403

    def test_get_user(self, client, admin_headers, staff):
        response = client.get(f'/api/v1/users/{staff.id}', headers=admin_headers)
        data = response.get_json()

        assert data["status_code"] == int(StatusCode.GET_USER_SUCCESSFULLY)
        assert "view orders" in data["data"]["permissions"]

    def test_get_missing_user(self, client, admin_headers):
        response = client.get('/api/v1/users/999', headers=admin_headers)
        data = response.get_json()

        assert response.status_code == 404
        assert data["status_code"] == int(StatusCode.USER_NOT_FOUND)
        assert data["message"] == "User not found."

    def test_update_email_and_password(self, client, admin_headers, staff, login):
        response = client.patch(f'/api/v1/users/{staff.id}', headers=admin_headers,
                                json={"email": "staff@example.com", "password": "changed-secret"})

        assert response.status_code == 200
        assert response.get_json()["status_code"] == int(StatusCode.UPDATE_USER_SUCCESSFULLY)
        assert login('staff@example.com', 'changed-secret')

    def test_update_to_taken_email(self, client, admin_headers, staff):
        response = client.patch(f'/api/v1/users/{staff.id}', headers=admin_headers,
                                json={"email": "admin@example.com"})

        assert response.status_code == 422

    def test_delete_user_revokes_tokens(self, client, admin_headers, staff, login, bearer):
        staff_headers = bearer(login('staff@example.com'))

        response = client.delete(f'/api/v1/users/{staff.id}', headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()["status_code"] == int(StatusCode.DELETE_USER_SUCCESSFULLY)
        assert ApiToken.query.filter_by(user_id=staff.id, revoked_at=None).count() == 0
        assert client.get('/api/v1/user-profile', headers=staff_headers).status_code == 401

    def test_cannot_delete_self(self, client, admin_headers, admin_user):
        response = client.delete(f'/api/v1/users/{admin_user.id}', headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()["status_code"] == int(StatusCode.CANNOT_DELETE_SELF)

    def test_restore_user(self, client, admin_headers, staff):
        client.delete(f'/api/v1/users/{staff.id}', headers=admin_headers)

        response = client.post(f'/api/v1/users/{staff.id}/restore', headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()["status_code"] == int(StatusCode.RESTORE_USER_SUCCESSFULLY)
        assert not db.session.get(User, staff.id).is_deleted

    def test_restore_live_user(self, client, admin_headers, staff):
        response = client.post(f'/api/v1/users/{staff.id}/restore', headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()["status_code"] == int(StatusCode.USER_NOT_DELETED)


class TestUserRoles:
    def test_get_roles(self, client, admin_headers, staff):
        response = client.get(f'/api/v1/users/{staff.id}/roles', headers=admin_headers)

        assert [r["name"] for r in response.get_json()["data"]["roles"]] == ["Sales"]

    def test_assign_and_remove_role(self, client, admin_headers, staff):
        assigned = client.post(f'/api/v1/users/{staff.id}/assign-role', headers=admin_headers,
                               json={"role": "Support"})
        assert assigned.get_json()["status_code"] == int(StatusCode.USER_ROLES_UPDATED)
        assert {r["name"] for r in assigned.get_json()["data"]["roles"]} == {"Sales", "Support"}

        removed = client.post(f'/api/v1/users/{staff.id}/remove-role', headers=admin_headers,
                              json={"role": "Sales"})
        assert [r["name"] for r in removed.get_json()["data"]["roles"]] == ["Support"]

    def test_assign_unknown_role(self, client, admin_headers, staff):
        response = client.post(f'/api/v1/users/{staff.id}/assign-role', headers=admin_headers,
                               json={"role": "Wizard"})

        assert response.status_code == 422
        assert "role" in response.get_json()["errors"]

    def test_sync_roles_takes_effect_for_cached_user(self, client, admin_headers, staff, login, bearer):
        staff_headers = bearer(login('staff@example.com'))
        assert client.get('/api/v1/users', headers=staff_headers).status_code == 403

        client.post(f'/api/v1/users/{staff.id}/sync-roles', headers=admin_headers, json={"roles": ["Manager"]})

        assert client.get('/api/v1/users', headers=staff_headers).status_code == 200

    def test_assign_requires_permission(self, client, staff, headers_for):
        headers = headers_for('view users', 'edit users', email='hr@example.com')

        response = client.post(f'/api/v1/users/{staff.id}/assign-role', headers=headers, json={"role": "Support"})

        assert response.status_code == 403


class TestCapabilityLookups:
    def test_user_permissions(self, client, admin_headers, make_user):
        user = make_user('mixed@example.com', roles=['Support'], permissions=['view brands'])

        response = client.get(f'/api/v1/users/{user.id}/permissions', headers=admin_headers)
        data = response.get_json()["data"]

        assert data["direct_permissions"] == ["view brands"]
        assert set(data["permissions"]) == {"view brands", "view orders", "edit orders", "process orders",
                                            "view customers"}

    def test_has_role(self, client, admin_headers, staff):
        yes = client.post(f'/api/v1/users/{staff.id}/has-role', headers=admin_headers, json={"role": "Sales"})
        no = client.post(f'/api/v1/users/{staff.id}/has-role', headers=admin_headers, json={"role": "Manager"})

        assert yes.get_json()["data"]["has_role"] is True
        assert no.get_json()["data"]["has_role"] is False

    def test_has_permission(self, client, admin_headers, staff):
        yes = client.post(f'/api/v1/users/{staff.id}/has-permission', headers=admin_headers,
                          json={"permission": "view orders"})
        no = client.post(f'/api/v1/users/{staff.id}/has-permission', headers=admin_headers,
                         json={"permission": "delete users"})
        unknown = client.post(f'/api/v1/users/{staff.id}/has-permission', headers=admin_headers,
                              json={"permission": "teleport"})

        assert yes.get_json()["data"]["has_permission"] is True
        assert no.get_json()["data"]["has_permission"] is False
        assert unknown.status_code == 422
