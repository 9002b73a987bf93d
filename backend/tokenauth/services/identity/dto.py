# tokenauth/services/identity/dto.py
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

ACTIVE_STATUS = "ACTIVE"


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Read-only user record supplied by the external user service.

    :param id: User identifier (token stores are keyed by it).
    :type id: int
    :param username: Login name, used as the token subject.
    :type username: str
    :param password_hash: Stored password hash (bcrypt or werkzeug format).
    :type password_hash: str
    :param firstname: Given name, embedded in access tokens.
    :type firstname: str
    :param lastname: Family name, embedded in access tokens.
    :type lastname: str
    :param email: Contact email.
    :type email: str
    :param status: Account status (``ACTIVE`` allows login).
    :type status: str
    :param roles: Role strings, embedded in access tokens as ``authorities``.
    :type roles: frozenset[str]
    """

    id: int
    username: str
    password_hash: str
    firstname: str = ""
    lastname: str = ""
    email: str = ""
    status: str = ACTIVE_STATUS
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_active(self) -> bool:
        return self.status.upper() == ACTIVE_STATUS

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> UserRecord:
        """
        Build a record from the user service JSON representation.

        The service names the hash field ``password``; roles may arrive as
        plain strings or as ``{"name": ...}`` objects.

        :param data: Decoded JSON body.
        :type data: Mapping[str, Any]
        :returns: Immutable user record.
        :rtype: UserRecord
        :raises KeyError: If ``id``, ``username`` or ``password`` are missing.
        """
        return cls(
            id=int(data["id"]),
            username=str(data["username"]),
            password_hash=str(data["password"]),
            firstname=str(data.get("firstname") or ""),
            lastname=str(data.get("lastname") or ""),
            email=str(data.get("email") or ""),
            status=str(data.get("status") or ACTIVE_STATUS),
            roles=_role_names(data.get("roles") or ()),
        )


def _role_names(raw: Iterable[Any]) -> frozenset[str]:
    names: set[str] = set()
    for item in raw:
        if isinstance(item, Mapping):
            item = item.get("name")
        if item:
            names.add(str(item))
    return frozenset(names)
