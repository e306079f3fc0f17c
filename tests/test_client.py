"""HTTP client: paths, auth header, error envelope parsing.

The session is replaced by a recorder so no server is needed.
"""

import json

import requests

from guild_hall_client import GuildHallAPI


def _response(status_code, payload=None):
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    resp.headers["Content-Type"] = "application/json"
    resp.url = "http://hall.test"
    return resp


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "headers": headers})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _client(*responses):
    session = FakeSession(*responses)
    return GuildHallAPI(base_url="http://hall.test/", session=session), session


def test_login_stores_token_for_later_calls():
    api, session = _client(_response(200, {"access_token": "tok", "token_type": "bearer"}), _response(200, {"id": "u1"}))

    api.login("a@example.com", "pw")
    data, error = api.me()

    assert error is None
    assert data == {"id": "u1"}
    assert session.calls[1]["url"] == "http://hall.test/api/v1/users/me"
    assert session.calls[1]["headers"] == {"Authorization": "Bearer tok"}


def test_list_groups_joins_types():
    api, session = _client(_response(200, []))

    api.list_groups(["party", "tavern"])

    assert session.calls[0]["params"] == {"type": "party,tavern"}


def test_invite_sends_uuid_query():
    api, session = _client(_response(200, {"id": "g1"}))

    api.invite("g1", "u2")

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/groups/g1/invite")
    assert call["params"] == {"uuid": "u2"}


def test_error_envelope_is_parsed():
    api, _ = _client(_response(401, {"error": {"kind": "PaymentRequired", "message": "Not enough gems!"}}))

    data, error = api.create_group({"name": "G", "type": "guild"})

    assert data is None
    assert error == {"status_code": 401, "kind": "PaymentRequired", "message": "Not enough gems!"}


def test_remove_member_reports_success_on_no_content():
    api, _ = _client(_response(204))

    ok, error = api.remove_member("g1", "u2")

    assert ok is True
    assert error is None


def test_network_failure_is_reported():
    api, _ = _client(requests.ConnectionError("refused"))

    data, error = api.get_heroes()

    assert data is None
    assert error["status_code"] is None
    assert "refused" in error["message"]
