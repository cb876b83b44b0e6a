# prompto/core/auth.py
from typing import Optional

from prompto.core.errors import MissingCredentialError
from prompto.core.settings import settings


MISSING_KEY_MESSAGE = (
    "Missing LangSmith API key. Pass Authorization: Bearer <key>, the apiKey "
    "parameter or --api-key, or set LANGSMITH_API_KEY."
)


def parse_bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header_value:
        return None
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def resolve_api_key(
    explicit_api_key: Optional[str] = None,
    bearer_token: Optional[str] = None
) -> str:
    """
    Resolve the credential for one call.

    Precedence: explicit per-call override > bearer token > LANGSMITH_API_KEY.
    Blank values count as absent.

    Raises:
        MissingCredentialError: if nothing resolves
    """
    for candidate in (explicit_api_key, bearer_token):
        if candidate and candidate.strip():
            return candidate.strip()

    if settings.LANGSMITH_API_KEY is not None:
        env_key = settings.LANGSMITH_API_KEY.get_secret_value().strip()
        if env_key:
            return env_key

    raise MissingCredentialError(MISSING_KEY_MESSAGE)
