from uuid import UUID

from fastapi import Depends, HTTPException, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from tasktracker.core.security import TOKEN_ACCESS, verify_token
from tasktracker.schemas.pagination import PaginationRequest
from tasktracker.services.pagination import resolve_pagination

bearer = HTTPBearer(auto_error=False)

def get_current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    if not creds:
        raise HTTPException(status_code=401, detail="Access token is missing")
    payload = verify_token(creds.credentials, TOKEN_ACCESS)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid or expired access token")
    return payload

def get_current_user_id(user: dict = Depends(get_current_user)) -> UUID:
    try:
        return UUID(str(user.get("sub") or "").strip())
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid or expired access token")

def require_role(*roles: str):
    def _inner(user: dict = Depends(get_current_user)) -> dict:
        if not user.get("role"):
            raise HTTPException(status_code=403, detail="Access denied: No role assigned")
        if user.get("role") not in roles:
            raise HTTPException(status_code=403, detail="Access denied: Insufficient permissions")
        return user
    return _inner

def get_pagination(
    page: str | None = Query(default=None, description="1-based page number"),
    limit: str | None = Query(default=None, description="Page size"),
    sort_key: str | None = Query(default=None, alias="sortKey"),
    sort_asc: str | None = Query(default=None, alias="sortAsc"),
) -> PaginationRequest:
    return resolve_pagination(page, limit, sort_key, sort_asc)

def get_relations(
    relations: list[str] = Query(default=[], description="Relations to load with each item, e.g. user"),
) -> list[str]:
    return [name.strip() for name in relations if name and name.strip()]
