from tokenauth.models.token import AccessToken, RefreshToken

__all__ = [
    "AccessToken",
    "RefreshToken",
]
