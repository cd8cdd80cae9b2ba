"""
Tests for role and permission management.
"""
from ecommerce_admin.constants import ALL_PERMISSIONS, ROLE_DEFINITIONS, StatusCode, SUPER_ADMIN_ROLE
from ecommerce_admin.models import Permission, Role, db


def permission_ids(*names):
    return [Permission.query.filter_by(name=name).one().id for name in names]


class TestSeededData:
    def test_catalogue_seeded(self, app):
        assert Permission.query.count() == len(ALL_PERMISSIONS)
        assert {role.name for role in Role.query} == set(ROLE_DEFINITIONS)

    def test_super_admin_holds_everything(self, app):
        role = Role.query.filter_by(name=SUPER_ADMIN_ROLE).one()

        assert len(role.permissions) == len(ALL_PERMISSIONS)


class TestRoles:
    def test_list_roles(self, client, admin_headers):
        response = client.get('/api/v1/roles?per_page=100', headers=admin_headers)

        assert response.get_json()["meta"]["pagination"]["total"] == len(ROLE_DEFINITIONS)

    def test_create_role_with_permissions(self, client, admin_headers):
        response = client.post('/api/v1/roles', headers=admin_headers, json={
            "name": "Auditor", "permissions": permission_ids('view logs', 'view users'),
        })
        data = response.get_json()["data"]

        assert response.status_code == 201
        assert sorted(p["name"] for p in data["permissions"]) == ["view logs", "view users"]

    def test_create_role_with_unknown_permission(self, client, admin_headers):
        response = client.post('/api/v1/roles', headers=admin_headers, json={"name": "Auditor", "permissions": [9999]})

        assert response.status_code == 422
        assert "permissions" in response.get_json()["errors"]

    def test_duplicate_role_name(self, client, admin_headers):
        response = client.post('/api/v1/roles', headers=admin_headers, json={"name": "manager"})

        assert response.status_code == 422

    def test_get_role_counts_users(self, client, admin_headers, make_user):
        make_user('sales@example.com', roles=['Sales'])
        role = Role.query.filter_by(name='Sales').one()

        response = client.get(f'/api/v1/roles/{role.id}', headers=admin_headers)

        assert response.get_json()["data"]["users_count"] == 1

    def test_super_admin_cannot_be_renamed_or_deleted(self, client, admin_headers):
        role = Role.query.filter_by(name=SUPER_ADMIN_ROLE).one()

        renamed = client.put(f'/api/v1/roles/{role.id}', headers=admin_headers, json={"name": "Root"})
        deleted = client.delete(f'/api/v1/roles/{role.id}', headers=admin_headers)

        assert renamed.status_code == 400
        assert renamed.get_json()["status_code"] == int(StatusCode.ROLE_PROTECTED)
        assert deleted.status_code == 400

    def test_delete_role_detaches_users(self, client, admin_headers, make_user):
        user = make_user('support@example.com', roles=['Support'])
        role_id = Role.query.filter_by(name='Support').one().id

        response = client.delete(f'/api/v1/roles/{role_id}', headers=admin_headers)

        assert response.status_code == 200
        assert db.session.get(Role, role_id) is None
        assert db.session.get(type(user), user.id).roles == []

    def test_sync_role_permissions_applies_immediately(self, client, admin_headers, make_user, login, bearer):
        make_user('support@example.com', roles=['Support'])
        headers = bearer(login('support@example.com'))
        assert client.get('/api/v1/brands', headers=headers).status_code == 403

        role = Role.query.filter_by(name='Support').one()
        synced = client.post(f'/api/v1/roles/{role.id}/permissions', headers=admin_headers,
                             json={"permissions": permission_ids('view brands')})

        assert synced.get_json()["status_code"] == int(StatusCode.ROLE_PERMISSIONS_SYNCED)
        assert client.get('/api/v1/brands', headers=headers).status_code == 200


class TestPermissions:
    def test_create_and_get_permission(self, client, admin_headers):
        created = client.post('/api/v1/permissions', headers=admin_headers,
                              json={"name": "export reports", "description": "CSV exports"})
        permission_id = created.get_json()["data"]["id"]

        response = client.get(f'/api/v1/permissions/{permission_id}', headers=admin_headers)

        assert created.status_code == 201
        assert response.get_json()["data"]["name"] == "export reports"

    def test_permission_roles(self, client, admin_headers):
        permission_id = permission_ids('process orders')[0]

        response = client.get(f'/api/v1/permissions/{permission_id}/roles', headers=admin_headers)
        names = {role["name"] for role in response.get_json()["data"]["roles"]}

        assert {"Support", "Sales", SUPER_ADMIN_ROLE} <= names

    def test_delete_assigned_permission_blocked(self, client, admin_headers):
        permission_id = permission_ids('view users')[0]

        response = client.delete(f'/api/v1/permissions/{permission_id}', headers=admin_headers)
        data = response.get_json()

        assert response.status_code == 400
        assert data["status_code"] == int(StatusCode.PERMISSION_IN_USE)
        assert data["errors"]["roles_count"] >= 1

    def test_delete_unassigned_permission(self, client, admin_headers, make_user):
        created = client.post('/api/v1/permissions', headers=admin_headers, json={"name": "beta feature"})
        permission_id = created.get_json()["data"]["id"]
        make_user('tester@example.com', permissions=['beta feature'])

        response = client.delete(f'/api/v1/permissions/{permission_id}', headers=admin_headers)

        assert response.status_code == 200
        assert db.session.get(Permission, permission_id) is None

    def test_staff_without_permission_denied(self, client, headers_for):
        response = client.post('/api/v1/permissions', headers=headers_for('view permissions'), json={"name": "x"})

        assert response.status_code == 403
