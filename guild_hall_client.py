"""Guild Hall API client.

A thin wrapper around the REST API served by ``guild_hall_api``.  The
client uses the ``requests`` library internally and exposes one
method per endpoint:

* :meth:`register_user`, :meth:`login` and :meth:`me` for accounts.
* :meth:`list_groups`, :meth:`get_group`, :meth:`create_group`,
  :meth:`update_group`, :meth:`join_group`, :meth:`leave_group`,
  :meth:`invite` and :meth:`remove_member` for membership.
* :meth:`post_chat` and :meth:`delete_chat_message` for group chat.
* :meth:`get_patrons`, :meth:`get_heroes`, :meth:`get_hero` and
  :meth:`update_hero` for the hall.
* :meth:`get_member` and :meth:`audit_logs` for the rest.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` and ``error`` is a
dictionary with the keys ``status_code``, ``kind`` and ``message``.

After a successful :meth:`login` the token is stored on the client and
sent as ``Authorization: Bearer <token>`` with every further request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class GuildHallAPI:
    """Client for interacting with the Guild Hall API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        prefix: str = "/api/v1",
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL for the API, e.g. ``https://example.com``.
            api_key: Optional bearer token, e.g. from :meth:`login`.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            prefix: Path prefix of the versioned API.
            timeout: Timeout in seconds for every request.
        """
        self.base_url = base_url.rstrip("/") + prefix
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _error_from_response(response: requests.Response) -> Dict[str, Any]:
        kind = None
        message = ""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict):
                kind = err.get("kind")
                message = err.get("message") or ""
            elif body.get("detail"):
                message = str(body["detail"])
        if not message:
            message = response.text or response.reason or ""
        return {"status_code": response.status_code, "kind": kind, "message": message}

    def _request(
        self, method: str, path: str, *, params: Dict[str, Any] | None = None,
        json_body: Any | None = None
    ) -> Result:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/groups``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.  ``data`` is ``None`` for empty
            responses such as ``204 No Content``.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            if exc.response is not None:
                error = self._error_from_response(exc.response)
            else:
                error = {"status_code": None, "kind": None, "message": str(exc)}
            logger.error("API request failed (%s): %s", error["status_code"], error["message"])
            return None, error
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "kind": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def register_user(self, email: str, password: str, name: str) -> Result:
        return self._request("POST", "/users/", json_body={"email": email, "password": password, "name": name})

    def login(self, email: str, password: str) -> Result:
        """Log in and remember the returned token for later calls."""
        data, error = self._request("POST", "/users/login", json_body={"email": email, "password": password})
        if error:
            return None, error
        if isinstance(data, dict) and data.get("access_token"):
            self.api_key = data["access_token"]
        return data, None

    def me(self) -> Result:
        return self._request("GET", "/users/me")

    def get_member(self, user_id: str) -> Result:
        return self._request("GET", f"/members/{user_id}")

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------
    def list_groups(self, types: Optional[Iterable[str]] = None) -> Result:
        """List visible groups.

        Args:
            types: Categories to fetch (``party``, ``guilds``, ``public``,
                ``tavern``).  When given the server returns one flat
                list; otherwise a map keyed by category.
        """
        params = {"type": ",".join(types)} if types else None
        return self._request("GET", "/groups/", params=params)

    def get_group(self, group_id: str) -> Result:
        return self._request("GET", f"/groups/{group_id}")

    def create_group(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/groups/", json_body=payload)

    def update_group(self, group_id: str, payload: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/groups/{group_id}", json_body=payload)

    def join_group(self, group_id: str) -> Result:
        return self._request("POST", f"/groups/{group_id}/join")

    def leave_group(self, group_id: str) -> Result:
        return self._request("POST", f"/groups/{group_id}/leave")

    def invite(self, group_id: str, user_id: str) -> Result:
        return self._request("POST", f"/groups/{group_id}/invite", params={"uuid": user_id})

    def remove_member(self, group_id: str, user_id: str) -> Tuple[bool, Optional[Dict[str, Any]]]:
        """Remove a member or revoke an invitation.

        Returns:
            A tuple ``(success, error)``.
        """
        _, error = self._request("POST", f"/groups/{group_id}/removeMember", params={"uuid": user_id})
        return error is None, error

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------
    def post_chat(self, group_id: str, message: str) -> Result:
        return self._request("POST", f"/groups/{group_id}/chat", json_body={"message": message})

    def delete_chat_message(self, group_id: str, message_id: str) -> Tuple[bool, Optional[Dict[str, Any]]]:
        _, error = self._request("DELETE", f"/groups/{group_id}/chat/{message_id}")
        return error is None, error

    # ------------------------------------------------------------------
    # Hall
    # ------------------------------------------------------------------
    def get_patrons(self, page: int = 0) -> Result:
        return self._request("GET", "/hall/patrons", params={"page": page})

    def get_heroes(self) -> Result:
        return self._request("GET", "/hall/heroes")

    def get_hero(self, hero_id: str) -> Result:
        return self._request("GET", f"/hall/heroes/{hero_id}")

    def update_hero(self, hero_id: str, patch: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/hall/heroes/{hero_id}", json_body=patch)

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------
    def audit_logs(self, **filters: Any) -> Result:
        params = {key: value for key, value in filters.items() if value is not None}
        return self._request("GET", "/audit/", params=params or None)
