"""Event Manager API client.

A thin wrapper around the REST API using the ``requests`` library.  It
keeps the session token the way the browser front-end keeps it: the
token returned by :meth:`EventManagerAPI.login` or
:meth:`EventManagerAPI.register` is stored on the client and sent as
``Authorization: Bearer <token>`` on every later call.  A 401 response
means the token expired or was rejected; the client then forgets it.

Every operation returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` (or an empty list for list
operations) and ``error`` is a dictionary with ``status_code`` and
``message``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class EventManagerAPI:
    """Client for the Event Manager API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL including the API prefix, e.g.
                ``http://localhost:5000/api``.
            token: Optional access token from an earlier login.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.user: Optional[Dict[str, Any]] = None
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request to the API.

        Returns ``(data, None)`` with the parsed JSON body on success and
        ``(None, error)`` on failure.
        """
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
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
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    message = exc.response.json().get("message", "")
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            if status == 401:
                # Stale or rejected session; the caller has to log in again.
                self.logout()
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _list(self, path: str, key: str, params: Dict[str, Any] | None = None) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", path, params=params)
        if error:
            return [], error
        return (data or {}).get(key, []), None

    @staticmethod
    def _event_body(
        title: str,
        date_time: datetime | str,
        location: str,
        max_capacity: int,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        if isinstance(date_time, datetime):
            date_time = date_time.isoformat()
        return {
            "title": title,
            "description": description,
            "date_time": date_time,
            "location": location,
            "max_capacity": max_capacity,
        }

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def _store_session(self, data: Optional[Dict[str, Any]]) -> None:
        if data and data.get("token"):
            self.token = data["token"]
            self.user = data.get("user")

    def register(self, email: str, name: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Create an account and keep its token for later calls."""
        data, error = self._request(
            "POST", "/auth/register", json_body={"email": email, "name": name, "password": password}
        )
        self._store_session(data)
        return data, error

    def login(self, email: str, password: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Log in and keep the token for later calls."""
        data, error = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        self._store_session(data)
        return data, error

    def logout(self) -> None:
        self.token = None
        self.user = None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def list_events(self) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Upcoming events with occupancy figures."""
        return self._list("/events", "events")

    def search_events(
        self,
        q: Optional[str] = None,
        location: Optional[str] = None,
        date_from: datetime | str | None = None,
        date_to: datetime | str | None = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        params: Dict[str, Any] = {}
        for key, value in (("q", q), ("location", location), ("date_from", date_from), ("date_to", date_to)):
            if value:
                params[key] = value.isoformat() if isinstance(value, datetime) else value
        return self._list("/events/search", "events", params=params)

    def get_event(self, event_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", f"/events/{event_id}")
        if error:
            return None, error
        return data.get("event"), None

    def events_by_creator(self, user_id: int) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        return self._list(f"/events/creator/{user_id}", "events")

    def create_event(
        self,
        title: str,
        date_time: datetime | str,
        location: str,
        max_capacity: int,
        description: Optional[str] = None,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        body = self._event_body(title, date_time, location, max_capacity, description)
        data, error = self._request("POST", "/events", json_body=body)
        if error:
            return None, error
        return data.get("event"), None

    def update_event(
        self,
        event_id: int,
        title: str,
        date_time: datetime | str,
        location: str,
        max_capacity: int,
        description: Optional[str] = None,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Replace all fields of an event; every field must be given."""
        body = self._event_body(title, date_time, location, max_capacity, description)
        data, error = self._request("PUT", f"/events/{event_id}", json_body=body)
        if error:
            return None, error
        return data.get("event"), None

    def delete_event(self, event_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/events/{event_id}")
        return error is None, error

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------
    def register_for_event(self, event_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("POST", f"/events/{event_id}/register")
        if error:
            return None, error
        return data.get("registration"), None

    def cancel_registration(self, event_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._request("DELETE", f"/events/{event_id}/register")
        return error is None, error

    def list_registrations(self, user_id: Optional[int] = None) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """Registrations of ``user_id``, defaulting to the logged-in user."""
        if user_id is None:
            if not self.user:
                return [], {"status_code": None, "message": "Not logged in"}
            user_id = self.user["id"]
        return self._list(f"/events/users/{user_id}/registrations", "registrations")

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------
    def get_profile(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", "/users/profile")
        if error:
            return None, error
        return data.get("user"), None

    def update_profile(self, name: str, email: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("PUT", "/users/profile", json_body={"name": name, "email": email})
        if error:
            return None, error
        self.user = data.get("user")
        return self.user, None

    def change_password(self, current_password: str, new_password: str) -> Tuple[bool, Optional[Error]]:
        _, error = self._request(
            "PUT",
            "/users/change-password",
            json_body={"currentPassword": current_password, "newPassword": new_password},
        )
        return error is None, error

    def get_stats(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        data, error = self._request("GET", "/users/stats")
        if error:
            return None, error
        return data.get("stats"), None
