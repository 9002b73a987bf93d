"""
tokenauth.security
==================

Token signing/verification and password checking primitives.

Modules
-------
- :mod:`claims`: typed :class:`~.AccessClaims` / :class:`~.RefreshClaims`.
- :mod:`signer`: :class:`~.CredentialSigner`, the stateless JWT builder/verifier.
- :mod:`passwords`: :func:`~.verify_password` oracle (bcrypt or werkzeug hashes).
"""
