from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from picker_gallery.core.security import admin_auth_configured, verify_admin_credentials
from picker_gallery.db.session import get_session
from picker_gallery.ingestion import build_content_store, build_picker_client
from picker_gallery.ingestion.base import BaseContentStore, BasePickerClient

basic_scheme = HTTPBasic(auto_error=False, realm="Admin Area")
_CHALLENGE = {"WWW-Authenticate": 'Basic realm="Admin Area"'}


async def get_db() -> AsyncSession:
    async for session in get_session():
        yield session


def get_picker_client() -> BasePickerClient:
    return build_picker_client()


def get_content_store() -> BaseContentStore:
    return build_content_store()


async def require_admin(credentials: HTTPBasicCredentials | None = Depends(basic_scheme)) -> str:
    if not admin_auth_configured():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin authentication not configured")
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required", headers=_CHALLENGE)
    if not verify_admin_credentials(credentials.username, credentials.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials", headers=_CHALLENGE)
    return credentials.username


async def get_optional_admin(credentials: HTTPBasicCredentials | None = Depends(basic_scheme)) -> str | None:
    if not credentials or not verify_admin_credentials(credentials.username, credentials.password):
        return None
    return credentials.username
