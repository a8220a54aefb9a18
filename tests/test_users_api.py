from datetime import timedelta

from utils.principal import UserPrincipal
from utils.security import TokenCodec, utcnow

from conftest import PASSWORD, bearer, login_member, login_user


def _register(client, email="new@example.com"):
    return client.post("/user/register", json={"name": "New", "email": email, "password": PASSWORD})


class TestRegisterAndLogin:
    def test_register_then_profile(self, client, user_store):
        resp = _register(client)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["user"]["email"] == "new@example.com"
        assert "password" not in body["user"]
        assert user_store.find_token(body["refreshToken"]) is not None

        cookie = "; ".join(resp.headers.getlist("Set-Cookie"))
        assert "userRefreshToken=" in cookie
        assert "HttpOnly" in cookie

        profile = client.get("/user/profile", headers=bearer(body["accessToken"]))
        assert profile.status_code == 200
        assert profile.get_json()["email"] == "new@example.com"

    def test_register_duplicate_email(self, client):
        assert _register(client).status_code == 201
        resp = _register(client, email="NEW@example.com")
        assert resp.status_code == 409

    def test_register_validation(self, client):
        resp = client.post("/user/register", json={"name": "x", "email": "bad", "password": "123"})
        assert resp.status_code == 422
        assert set(resp.get_json()["details"]) == {"email", "password"}

    def test_login_failures_look_alike(self, client, user):
        wrong_password = login_user(client, password="wrong-password")
        unknown_email = login_user(client, email="nobody@example.com")
        assert wrong_password.status_code == unknown_email.status_code == 400
        assert wrong_password.get_json()["message"] == unknown_email.get_json()["message"]

    def test_seven_logins_keep_six_sessions(self, client, user, user_store):
        tokens = []
        for _ in range(7):
            resp = login_user(client)
            assert resp.status_code == 200
            tokens.append(resp.get_json()["refreshToken"])

        assert user_store.count_tokens(user.id) == 6
        assert user_store.find_token(tokens[0]) is None
        assert all(user_store.find_token(t) is not None for t in tokens[1:])


class TestAccessControl:
    def test_expired_access_token(self, app, client, user):
        past = utcnow() - timedelta(hours=1)
        stale = TokenCodec(
            app.config["JWT_ACCESS_SECRET"],
            app.config["JWT_REFRESH_SECRET"],
            issuer=app.config["JWT_ISSUER"],
            clock=lambda: past,
        )
        token = stale.generate_access_token(UserPrincipal(id=user.id))
        assert client.get("/user/profile", headers=bearer(token)).status_code == 401

    def test_user_cannot_reach_supervisor_routes(self, client, user):
        token = login_user(client).get_json()["accessToken"]
        assert client.get("/member/members", headers=bearer(token)).status_code == 403
        assert client.get("/member/members/users", headers=bearer(token)).status_code == 403

    def test_member_cannot_reach_user_routes(self, client, creator):
        token = login_member(client, "cree@example.com").get_json()["accessToken"]
        assert client.get("/user/profile", headers=bearer(token)).status_code == 403

    def test_no_token(self, client):
        resp = client.get("/user/profile")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"


class TestRefreshAndLogout:
    def test_refresh_rotates_token(self, app, client, user, user_store):
        first = login_user(client).get_json()

        # cookie set by login is sent back
        resp = client.get("/user/refresh")
        assert resp.status_code == 200
        second = resp.get_json()
        assert second["refreshToken"] != first["refreshToken"]
        assert user_store.find_token(first["refreshToken"]) is None
        assert user_store.find_token(second["refreshToken"]) is not None
        assert client.get("/user/profile", headers=bearer(second["accessToken"])).status_code == 200

        replay = app.test_client().get("/user/refresh", json={"refreshToken": first["refreshToken"]})
        assert replay.status_code == 401

    def test_refresh_without_token(self, app):
        assert app.test_client().get("/user/refresh").status_code == 400

    def test_refresh_with_garbage(self, app):
        resp = app.test_client().get("/user/refresh", json={"refreshToken": "garbage"})
        assert resp.status_code == 401

    def test_member_token_cannot_refresh_user_session(self, app, creator):
        client = app.test_client()
        member_token = login_member(client, "cree@example.com").get_json()["refreshToken"]
        resp = app.test_client().get("/user/refresh", json={"refreshToken": member_token})
        assert resp.status_code == 401

    def test_logout_forgets_token(self, app, client, user, user_store):
        token = login_user(client).get_json()["refreshToken"]
        resp = client.post("/user/logout")
        assert resp.status_code == 200
        assert user_store.find_token(token) is None

        cookie = "; ".join(resp.headers.getlist("Set-Cookie"))
        assert "userRefreshToken=;" in cookie

        # a second logout is harmless
        assert client.post("/user/logout").status_code == 200


class TestProfile:
    def test_update_profile(self, client, user):
        token = login_user(client).get_json()["accessToken"]
        resp = client.put("/user/profile", json={"name": "Janet", "location": "Lisbon"}, headers=bearer(token))
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "Janet"
        assert resp.get_json()["location"] == "Lisbon"

    def test_delete_profile_removes_sessions(self, client, user, user_store):
        body = login_user(client).get_json()
        resp = client.delete("/user/profile", headers=bearer(body["accessToken"]))
        assert resp.status_code == 200
        assert user_store.find_token(body["refreshToken"]) is None
        assert login_user(client).status_code == 400
