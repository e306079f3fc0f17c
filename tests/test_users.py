"""Users: registration, login, own profile, member cards, tokens."""

from guild_hall_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

API = "/api/v1/users"


async def _register(client, email="Alice@Example.com", password="s3cret", name="alice"):
    return await client.post(f"{API}/", json={"email": email, "password": password, "name": name})


async def test_register_creates_empty_profile(client):
    res = await _register(client)

    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "alice@example.com"
    assert body["balance"] == 0
    assert body["invitations"] == {"party": None, "guilds": []}
    assert "password" not in body


async def test_register_duplicate_email_is_rejected(client):
    await _register(client)

    res = await _register(client, email="alice@example.com")

    assert res.status_code == 400
    assert res.json()["error"]["kind"] == "BadRequest"


async def test_login_and_read_own_profile(client):
    await _register(client)

    res = await client.post(f"{API}/login", json={"email": "alice@example.com", "password": "s3cret"})
    assert res.status_code == 200
    token = res.json()["access_token"]
    assert res.json()["token_type"] == "bearer"

    me = await client.get(f"{API}/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "alice"


async def test_login_with_wrong_password_is_rejected(client):
    await _register(client)

    res = await client.post(f"{API}/login", json={"email": "alice@example.com", "password": "nope"})

    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "NotAuthorized"


async def test_invalid_token_is_rejected(client):
    res = await client.get(f"{API}/me", headers={"Authorization": "Bearer not.a.token"})

    assert res.status_code == 401
    assert res.json() == {"error": {"kind": "NotAuthorized", "message": "Invalid or expired token"}}


async def test_token_for_deleted_user_is_rejected(client):
    res = await client.get(f"{API}/me", headers={"Authorization": f"Bearer {create_access_token({'sub': 'gone'})}"})

    assert res.status_code == 401
    assert res.json()["error"]["kind"] == "NotAuthorized"


async def test_blocked_user_is_rejected_with_envelope(client, make_user, auth):
    alice = make_user("alice", auth_blocked=True)

    res = await client.get(f"{API}/me", headers=auth(alice))

    assert res.status_code == 401
    assert res.json() == {"error": {"kind": "NotAuthorized", "message": "User account blocked"}}
    assert res.headers["www-authenticate"] == "Bearer"


async def test_member_card_has_detailed_projection(client, make_user, auth):
    alice = make_user("alice")
    bob = make_user("bob", backer={"tier": 3}, items={"currentMount": "Wolf-Base"})

    res = await client.get(f"/api/v1/members/{bob.id}", headers=auth(alice))

    assert res.status_code == 200
    assert res.json() == {
        "id": bob.id,
        "name": "bob",
        "contributor": None,
        "backer": {"tier": 3},
        "items": {"currentMount": "Wolf-Base"},
    }


async def test_member_card_of_unknown_user_is_not_found(client, make_user, auth):
    alice = make_user("alice")

    res = await client.get("/api/v1/members/ghost", headers=auth(alice))

    assert res.status_code == 404


def test_token_round_trip():
    token = create_access_token({"sub": "user-1"})
    assert decode_access_token(token)["sub"] == "user-1"


def test_tampered_token_is_rejected():
    token = create_access_token({"sub": "user-1"})
    header, payload, signature = token.split(".")
    forged = create_access_token({"sub": "user-2"}).split(".")[1]
    assert decode_access_token(f"{header}.{forged}.{signature}") is None


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "user-1"}, expires_delta=-10)
    assert decode_access_token(token) is None


def test_password_hashing():
    hashed = hash_password("hunter2")
    assert verify_password("hunter2", hashed)
    assert not verify_password("hunter3", hashed)
    assert not verify_password("hunter2", None)
