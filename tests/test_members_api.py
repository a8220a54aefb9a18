from models import storage
from models.member import Member
from utils.principal import Role

from conftest import PASSWORD, bearer, login_member, login_user


def _token(client, email):
    return login_member(client, email).get_json()["accessToken"]


class TestMemberAccounts:
    def test_supervisor_creates_creator(self, client, supervisor):
        token = _token(client, "sue@example.com")
        resp = client.post(
            "/member",
            json={"firstName": "Nina", "lastName": "Chef", "email": "Nina@Example.com", "password": PASSWORD},
            headers=bearer(token),
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["role"] == "Creator"
        assert body["email"] == "nina@example.com"
        assert login_member(client, "nina@example.com").status_code == 200

    def test_creator_cannot_create_members(self, client, creator):
        token = _token(client, "cree@example.com")
        resp = client.post(
            "/member",
            json={"firstName": "A", "lastName": "B", "email": "a@example.com", "password": PASSWORD},
            headers=bearer(token),
        )
        assert resp.status_code == 403

    def test_duplicate_member_email(self, client, supervisor, creator):
        token = _token(client, "sue@example.com")
        resp = client.post(
            "/member",
            json={"firstName": "A", "lastName": "B", "email": "cree@example.com", "password": PASSWORD},
            headers=bearer(token),
        )
        assert resp.status_code == 409

    def test_user_credentials_do_not_log_in_members(self, client, user):
        assert login_member(client, "jane@example.com").status_code == 400

    def test_profile_for_both_member_roles(self, client, supervisor, creator):
        for email, role in (("sue@example.com", "Supervisor"), ("cree@example.com", "Creator")):
            resp = client.get("/member/profile", headers=bearer(_token(client, email)))
            assert resp.status_code == 200
            assert resp.get_json()["role"] == role

    def test_update_profile(self, client, creator):
        token = _token(client, "cree@example.com")
        resp = client.put("/member/profile", json={"firstName": "Crea"}, headers=bearer(token))
        assert resp.status_code == 200
        assert resp.get_json()["firstName"] == "Crea"


class TestSupervisorRoutes:
    def test_list_members_with_role_filter(self, client, supervisor, creator):
        token = _token(client, "sue@example.com")
        resp = client.get("/member/members?role=Creator&page=1&limit=5", headers=bearer(token))
        assert resp.status_code == 200
        body = resp.get_json()
        assert [m["email"] for m in body["data"]] == ["cree@example.com"]
        assert body["meta"]["total"] == 1

    def test_list_members_forbidden_for_creator(self, client, creator):
        token = _token(client, "cree@example.com")
        assert client.get("/member/members", headers=bearer(token)).status_code == 403

    def test_list_and_get_users(self, client, supervisor, user):
        token = _token(client, "sue@example.com")
        listing = client.get("/member/members/users", headers=bearer(token))
        assert listing.status_code == 200
        assert [u["email"] for u in listing.get_json()["data"]] == ["jane@example.com"]

        one = client.get(f"/member/members/users/{user.id}", headers=bearer(token))
        assert one.status_code == 200
        assert client.get("/member/members/users/missing", headers=bearer(token)).status_code == 404

    def test_supervisor_deletes_creator(self, client, supervisor, creator, member_store):
        refresh = login_member(client, "cree@example.com").get_json()["refreshToken"]
        token = _token(client, "sue@example.com")

        resp = client.delete(f"/member/{creator.id}", headers=bearer(token))
        assert resp.status_code == 200
        assert storage.get(Member, creator.id) is None
        assert member_store.find_token(refresh) is None

    def test_supervisor_cannot_delete_other_supervisor(self, client, supervisor):
        from api.members import create_member

        other = create_member("Otto", "Boss", "otto@example.com", PASSWORD, role=Role.SUPERVISOR)
        token = _token(client, "sue@example.com")
        assert client.delete(f"/member/{other.id}", headers=bearer(token)).status_code == 403


class TestMemberSessions:
    def test_refresh_rotates_and_keeps_role(self, app, client, supervisor, member_store, codec):
        first = login_member(client, "sue@example.com").get_json()

        resp = client.get("/member/refresh")
        assert resp.status_code == 200
        second = resp.get_json()
        assert member_store.find_token(first["refreshToken"]) is None

        principal = codec.validate_access_token(second["accessToken"])
        assert principal.kind == "member"
        assert principal.role is Role.SUPERVISOR

        replay = app.test_client().get("/member/refresh", json={"refreshToken": first["refreshToken"]})
        assert replay.status_code == 401

    def test_user_refresh_token_is_rejected(self, app, client, user):
        user_token = login_user(client).get_json()["refreshToken"]
        resp = app.test_client().get("/member/refresh", json={"refreshToken": user_token})
        assert resp.status_code == 401

    def test_logout(self, client, creator, member_store):
        token = login_member(client, "cree@example.com").get_json()["refreshToken"]
        assert client.post("/member/logout").status_code == 200
        assert member_store.find_token(token) is None
