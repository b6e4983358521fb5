"""Minimal Cloud Foundry v2 API client.

Only what the nozzle needs: log in with a username/password (UAA password
grant), read ``/v2/info`` and resolve an application GUID to its app, space
and org names.

Usage::

    client = CFClient("https://api.example.com", "admin", "secret")
    client.login()
    identity = client.get_app("6f1b2c9e-...")
"""
from __future__ import annotations

import base64
import http.client
import json
import logging
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from ..config import Settings
from ..errors import ClientError
from ..resolver.cache import ResolvedIdentity

logger = logging.getLogger(__name__)

# Public client id used by the cf CLI; it has no secret.
UAA_CLIENT_ID = "cf"


class CFClient:
    """Authenticated handle on the platform API.

    A client is built once and never re-authenticated in place; token
    refresh creates a new client and swaps it in (see ``handle.py``).
    """

    def __init__(
        self,
        api_addr: str,
        username: str,
        password: str,
        skip_ssl_validation: bool = True,
        timeout: float = 10.0,
    ) -> None:
        if not api_addr:
            raise ValueError("API address must not be empty")
        self._api = api_addr.rstrip("/")
        self._username = username
        self._password = password
        self._timeout = timeout
        self._ssl = ssl.create_default_context()
        if skip_ssl_validation:
            self._ssl.check_hostname = False
            self._ssl.verify_mode = ssl.CERT_NONE
        self._access_token = ""
        self._info: dict[str, Any] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CFClient":
        """Build and log in a client from the loaded settings."""
        client = cls(
            settings.api_addr,
            settings.cf_username,
            settings.cf_password,
            skip_ssl_validation=settings.skip_ssl_validation,
            timeout=settings.request_timeout,
        )
        client.login()
        return client

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self) -> None:
        """Obtain an access token from the UAA advertised in ``/v2/info``."""
        info = self.get_info()
        auth_endpoint = info.get("token_endpoint") or info.get("authorization_endpoint")
        if not auth_endpoint:
            raise ClientError("platform info does not advertise an authorization endpoint")

        form = urllib.parse.urlencode({
            "grant_type": "password",
            "username": self._username,
            "password": self._password,
        }).encode()
        basic = base64.b64encode(f"{UAA_CLIENT_ID}:".encode()).decode()
        payload = self._request(
            "POST",
            f"{auth_endpoint.rstrip('/')}/oauth/token",
            data=form,
            headers={
                "Authorization": f"Basic {basic}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
        )
        token = payload.get("access_token")
        if not token:
            raise ClientError("token response did not contain an access token")
        self._access_token = token
        logger.info("logged in to %s as %s", self._api, self._username)

    def get_token(self) -> str:
        """Return the bearer token for the firehose subscription."""
        if not self._access_token:
            raise ClientError("client is not logged in")
        return f"bearer {self._access_token}"

    # ------------------------------------------------------------------
    # API calls
    # ------------------------------------------------------------------

    def get_info(self) -> dict[str, Any]:
        """Return ``/v2/info`` (cached after the first call)."""
        if self._info is None:
            self._info = self._request("GET", f"{self._api}/v2/info")
        return self._info

    @property
    def doppler_endpoint(self) -> str:
        return str(self.get_info().get("doppler_logging_endpoint", ""))

    def get_app(self, app_guid: str) -> ResolvedIdentity:
        """Resolve an app GUID to names and GUIDs of the app, its space and org."""
        try:
            app = self._get(f"/v2/apps/{app_guid}")["entity"]
            space_guid = app["space_guid"]
            space = self._get(f"/v2/spaces/{space_guid}")["entity"]
            org_guid = space["organization_guid"]
            org = self._get(f"/v2/organizations/{org_guid}")["entity"]
            return ResolvedIdentity(
                app_name=app["name"],
                app_id=app_guid,
                space_name=space["name"],
                space_id=space_guid,
                org_name=org["name"],
                org_id=org_guid,
            )
        except (KeyError, TypeError) as exc:
            raise ClientError(f"unexpected API response for app {app_guid}: missing {exc}") from exc

    def _get(self, path: str) -> dict[str, Any]:
        if not self._access_token:
            raise ClientError("client is not logged in")
        return self._request(
            "GET",
            f"{self._api}{path}",
            headers={"Authorization": f"bearer {self._access_token}"},
        )

    def _request(
        self,
        method: str,
        url: str,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            req = urllib.request.Request(
                url,
                data=data,
                headers={"Accept": "application/json", **(headers or {})},
                method=method,
            )
            with urllib.request.urlopen(req, timeout=self._timeout, context=self._ssl) as resp:
                body = resp.read()
        except urllib.error.HTTPError as exc:
            raise ClientError(f"{method} {url} returned HTTP {exc.code}") from exc
        except OSError as exc:
            raise ClientError(f"{method} {url} failed: {exc}") from exc
        except (http.client.HTTPException, ValueError) as exc:
            raise ClientError(f"{method} {url} failed: {exc!r}") from exc

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ClientError(f"{method} {url} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise ClientError(f"{method} {url} returned unexpected payload")
        return payload

    def __repr__(self) -> str:
        return f"CFClient(api={self._api!r}, user={self._username!r})"
