"""Password verification against hashes stored by the user service."""

from __future__ import annotations

import bcrypt
from werkzeug.security import check_password_hash

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def verify_password(plain: str, password_hash: str) -> bool:
    """
    Verify ``plain`` against ``password_hash``.

    Bcrypt hashes (``$2a$``/``$2b$``/``$2y$``) are checked with :mod:`bcrypt`;
    anything else is treated as a werkzeug ``method$salt$hash`` string.

    :param plain: Candidate password.
    :type plain: str
    :param password_hash: Stored hash.
    :type password_hash: str
    :returns: ``True`` if it matches; otherwise ``False``.
    :rtype: bool
    """
    if not plain or not password_hash:
        return False
    if password_hash.startswith(BCRYPT_PREFIXES):
        # bcrypt only considers the first 72 bytes.
        try:
            return bcrypt.checkpw(plain.encode("utf-8")[:72], password_hash.encode("utf-8"))
        except ValueError:
            return False
    try:
        # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
        return bool(check_password_hash(password_hash, plain))
    except ValueError:  # unknown hash method
        return False
