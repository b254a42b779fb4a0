import logging
from typing import TypeVar

from fastapi import Depends, HTTPException, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from dentflow.core.db import get_db
from dentflow.core.security import decode_access_token
from dentflow.models.user import User, RoleEnum
from dentflow.services.audit_trail import set_actor

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

M = TypeVar("M")


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    if creds is None:
        raise HTTPException(status_code=401, detail="Unauthorized", headers={"WWW-Authenticate": "Bearer"})
    try:
        payload = decode_access_token(creds.credentials)
        sub: str | None = payload.get("sub")
        if not sub:
            raise HTTPException(status_code=401, detail="Invalid token")
    except JWTError:
        logger.warning("Rejected invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid token")

    result = await db.execute(select(User).where(User.id == sub))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")

    # every write in this request is attributed to this user
    set_actor(db, user.id)
    return user

# --- Ownership scoping ---
def is_admin(user: User) -> bool:
    return user.role == RoleEnum.admin

def owned(q: Select, model, user: User) -> Select:
    """Non-admins only ever see rows they created."""
    if is_admin(user):
        return q
    return q.where(model.created_by == user.id)

async def get_owned_or_404(db: AsyncSession, model: type[M], id: str, user: User, what: str) -> M:
    res = await db.execute(owned(select(model).where(model.id == id), model, user))
    obj = res.scalar_one_or_none()
    if not obj:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return obj

# --- Pagination ---
class Page:
    """limit/offset query params clamped instead of rejected."""

    def __init__(self, default_limit: int = 100, max_limit: int = 200):
        self.default_limit = default_limit
        self.max_limit = max_limit

    def __call__(
        self,
        limit: int | None = Query(None),
        offset: int | None = Query(None),
    ) -> tuple[int, int]:
        lim = self.default_limit if limit is None else limit
        return max(1, min(lim, self.max_limit)), max(0, offset or 0)
