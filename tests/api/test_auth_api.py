"""HTTP tests for /api/v1/auth: status codes, error shape and headers."""

from app.api.v1.dependencies import get_password_reset_job
from app.application.services.auth_service import PASSWORD_RESET_ACK
from app.domain.enums import PrincipalRole
from app.main import app

API = "/api/v1"
PASSWORD = "correct horse battery"

AUTH = f"{API}/auth"


async def _join(client, email: str = "member@example.com", **extra):
    return await client.post(f"{AUTH}/join", json={"email": email, "password": PASSWORD, **extra})


class TestJoin:
    async def test_join_returns_principal_and_tokens(self, client) -> None:
        response = await _join(client, username="member1", display_name="Member One")
        assert response.status_code == 201
        body = response.json()
        assert body["principal"]["state"] == "pending_verification"
        assert body["principal"]["username"] == "member1"
        assert body["token"]["token_type"] == "bearer"
        assert {"access", "refresh", "expired_at", "refreshable_until"} <= body["token"].keys()
        assert response.headers["Cache-Control"] == "no-store"
        assert "X-Request-ID" in response.headers

    async def test_duplicate_join_conflicts(self, client) -> None:
        await _join(client)
        response = await _join(client, email="MEMBER@example.com")
        assert response.status_code == 409
        assert response.json() == {
            "error": "CONFLICT",
            "message": "Email already registered",
            "details": {"field": "email"},
        }

    async def test_malformed_body_is_422(self, client) -> None:
        response = await client.post(f"{AUTH}/join", json={"email": "nope", "password": "x"})
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert "input" not in body["details"]["errors"][0]

    async def test_staff_join_is_forbidden(self, client) -> None:
        response = await _join(client, role="admin")
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"

    async def test_guest_join(self, client) -> None:
        response = await client.post(f"{AUTH}/guest/join")
        assert response.status_code == 201
        assert response.json()["principal"]["role"] == "guest"


class TestLoginAndTokens:
    async def test_login_failure_is_generic(self, client) -> None:
        await _join(client)
        wrong = await client.post(
            f"{AUTH}/login", json={"identifier": "member@example.com", "password": "nope"}
        )
        unknown = await client.post(
            f"{AUTH}/login", json={"identifier": "ghost@example.com", "password": "nope"}
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["error"] == "INVALID_CREDENTIALS"

    async def test_lockout_returns_retry_after(self, client) -> None:
        await _join(client)
        for _ in range(5):
            await client.post(
                f"{AUTH}/login", json={"identifier": "member@example.com", "password": "nope"}
            )
        response = await client.post(
            f"{AUTH}/login", json={"identifier": "member@example.com", "password": PASSWORD}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "ACCOUNT_LOCKED"
        assert 0 < int(response.headers["Retry-After"]) <= 900

    async def test_refresh_rotation_and_replay(self, client) -> None:
        first = (await _join(client)).json()["token"]

        rotated = await client.post(f"{AUTH}/refresh", json={"refresh": first["refresh"]})
        assert rotated.status_code == 200
        assert rotated.json()["refresh"] != first["refresh"]
        assert rotated.json()["refreshable_until"] == first["refreshable_until"]

        replay = await client.post(f"{AUTH}/refresh", json={"refresh": first["refresh"]})
        assert replay.status_code == 401
        assert replay.headers["WWW-Authenticate"] == "Bearer"

        successor = await client.post(
            f"{AUTH}/refresh", json={"refresh": rotated.json()["refresh"]}
        )
        assert successor.status_code == 401

    async def test_me_requires_bearer(self, client) -> None:
        token = (await _join(client)).json()["token"]
        assert (await client.get(f"{AUTH}/me")).status_code == 401
        response = await client.get(
            f"{AUTH}/me", headers={"Authorization": f"Bearer {token['access']}"}
        )
        assert response.status_code == 200
        assert response.json()["email"] == "member@example.com"
        assert "credential_hash" not in response.json()

    async def test_refresh_token_is_not_a_bearer(self, client) -> None:
        token = (await _join(client)).json()["token"]
        response = await client.get(
            f"{AUTH}/me", headers={"Authorization": f"Bearer {token['refresh']}"}
        )
        assert response.status_code == 401

    async def test_logout(self, client) -> None:
        token = (await _join(client)).json()["token"]
        response = await client.post(f"{AUTH}/logout", json={"refresh": token["refresh"]})
        assert response.status_code == 204
        again = await client.post(f"{AUTH}/logout", json={"refresh": token["refresh"]})
        assert again.status_code == 204
        refresh = await client.post(f"{AUTH}/refresh", json={"refresh": token["refresh"]})
        assert refresh.status_code == 401

    async def test_logout_all(self, client) -> None:
        token = (await _join(client)).json()["token"]
        headers = {"Authorization": f"Bearer {token['access']}"}
        assert (await client.post(f"{AUTH}/logout-all", headers=headers)).status_code == 204
        refresh = await client.post(f"{AUTH}/refresh", json={"refresh": token["refresh"]})
        assert refresh.status_code == 401


class TestPasswordsAndVerification:
    async def test_change_password(self, client) -> None:
        token = (await _join(client)).json()["token"]
        headers = {"Authorization": f"Bearer {token['access']}"}
        response = await client.put(
            f"{AUTH}/password",
            headers=headers,
            json={"current_password": PASSWORD, "new_password": "a different password"},
        )
        assert response.status_code == 200
        same = await client.put(
            f"{AUTH}/password",
            headers=headers,
            json={
                "current_password": "a different password",
                "new_password": "a different password",
            },
        )
        assert same.status_code == 400
        assert same.json()["error"] == "SAME_PASSWORD"

    async def test_password_reset_cycle(self, client, captured) -> None:
        await _join(client)
        unknown = await client.post(
            f"{AUTH}/password-reset/request", json={"email": "ghost@example.com"}
        )
        known = await client.post(
            f"{AUTH}/password-reset/request", json={"email": "member@example.com"}
        )
        assert unknown.status_code == known.status_code == 202
        assert unknown.json() == known.json()

        confirm = await client.post(
            f"{AUTH}/password-reset/confirm",
            json={"token": captured.last_reset_token, "new_password": "brand new password"},
        )
        assert confirm.status_code == 200
        reused = await client.post(
            f"{AUTH}/password-reset/confirm",
            json={"token": captured.last_reset_token, "new_password": "another new password"},
        )
        assert reused.status_code == 401

    async def test_password_reset_lookup_runs_after_the_response(self, client) -> None:
        scheduled: list[tuple[str, PrincipalRole]] = []

        async def record(email: str, role: PrincipalRole) -> None:
            scheduled.append((email, role))

        app.dependency_overrides[get_password_reset_job] = lambda: record
        response = await client.post(
            f"{AUTH}/password-reset/request",
            json={"email": "ghost@example.com", "role": "moderator"},
        )

        assert response.status_code == 202
        assert response.json() == {"message": PASSWORD_RESET_ACK}
        assert scheduled == [("ghost@example.com", PrincipalRole.MODERATOR)]

    async def test_email_verification_with_cooldown(self, client, captured) -> None:
        await _join(client)
        first = await client.post(
            f"{AUTH}/email-verification/request", json={"email": "member@example.com"}
        )
        assert first.status_code == 202
        second = await client.post(
            f"{AUTH}/email-verification/request", json={"email": "member@example.com"}
        )
        assert second.status_code == 429
        assert second.json()["error"] == "RATE_LIMITED"
        assert int(second.headers["Retry-After"]) > 0

        confirm = await client.post(
            f"{AUTH}/email-verification/confirm",
            json={"token": captured.last_verification_token},
        )
        assert confirm.status_code == 200
        assert confirm.json()["status"] == "verified"
