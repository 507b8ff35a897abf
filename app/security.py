from fastapi import Depends, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_403_FORBIDDEN

from app.settings import Settings, settings

API_KEY_NAME = "X-Revalidate-Key"
api_key_header = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_revalidate_key(
    api_key_header: str = Security(api_key_header),
    current_settings: Settings = Depends(get_settings),
):
    """
    Guard for on-demand revalidation.
    Leaving REVALIDATE_API_KEY unset rejects every request.
    """
    expected = current_settings.REVALIDATE_API_KEY
    if expected and api_key_header == expected:
        return api_key_header
    raise HTTPException(
        status_code=HTTP_403_FORBIDDEN,
        detail="Could not validate revalidation key",
    )
