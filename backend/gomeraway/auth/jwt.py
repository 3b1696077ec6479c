"""JWT verification for bearer tokens issued by the external auth provider."""

from jose import jwt

from gomeraway.config import settings


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Audience is not checked; providers set it to their own client role.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"verify_aud": False},
    )
