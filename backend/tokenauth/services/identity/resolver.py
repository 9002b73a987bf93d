# tokenauth/services/identity/resolver.py
from __future__ import annotations

import logging

from tokenauth.services._shared.errors import NotFoundError
from tokenauth.services._shared.ports.user_provider import UserProvider
from tokenauth.services.identity.dto import UserRecord

log = logging.getLogger(__name__)


class IdentityResolver:
    """
    Resolve usernames to user records through a :class:`UserProvider`.

    One blocking provider call per lookup; no retry and no caching.
    """

    def __init__(self, provider: UserProvider) -> None:
        self.provider = provider

    def get_user_by_username(self, username: str) -> UserRecord:
        """
        Load the user named ``username``.

        :param username: Login name (token subject).
        :type username: str
        :returns: User record.
        :rtype: UserRecord
        :raises NotFoundError: If the provider knows no such user.
        """
        user = self.provider.find_by_username(username)
        if user is None:
            raise NotFoundError("User", username)
        log.info("user.loaded username=%s", username, extra={"username": username})
        return user
