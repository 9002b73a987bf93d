"""``requests`` adapter for the external user service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

import requests

from tokenauth.services._shared.errors import UserServiceError
from tokenauth.services.identity.dto import UserRecord

log = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpUserServiceClient:
    """
    :class:`UserProvider` backed by ``GET {base_url}/users/username/{username}``.

    A 404 means "no such user"; any other non-2xx status raises
    :class:`UserServiceError`. Transport errors from :mod:`requests`
    propagate unchanged. No retries.

    :param base_url: Root URL of the user service API.
    :param timeout: Per-request timeout in seconds.
    :param session: Optional shared :class:`requests.Session`.
    """

    base_url: str
    timeout: float = 5.0
    session: requests.Session = field(default_factory=requests.Session)

    def find_by_username(self, username: str) -> UserRecord | None:
        url = f"{self.base_url.rstrip('/')}/users/username/{quote(username, safe='')}"
        resp = self.session.get(url, timeout=self.timeout, headers={"Accept": "application/json"})
        if resp.status_code == 404:
            return None
        if not resp.ok:
            log.error("user_service.error status=%s", resp.status_code, extra={"username": username})
            raise UserServiceError(resp.status_code)
        try:
            return UserRecord.from_payload(resp.json())
        except (KeyError, TypeError, ValueError) as exc:
            raise UserServiceError(resp.status_code, "Malformed user service response") from exc
