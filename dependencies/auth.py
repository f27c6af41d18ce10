from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.supabase_client import get_supabase_client
from models.data_visibility import is_privileged
from models.enums import UserRole


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model
# ============================================================
class CurrentUser(BaseModel):
    id: str                                 # Supabase Auth UID
    email: str
    organization_id: Optional[str] = None
    role: Optional[UserRole] = None         # role inside organization_id
    full_name: Optional[str] = None

    @property
    def is_org_admin(self) -> bool:
        return is_privileged(self.role)


# ============================================================
# AUTH DECODING (Supabase: validates JWT + reads metadata)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    token = credentials.credentials

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
    except Exception:
        raise unauthorized

    if not auth_resp or not auth_resp.user:
        raise unauthorized
    auth_user = auth_resp.user

    if not auth_user.email:
        raise unauthorized

    metadata = auth_user.user_metadata or {}

    # Unknown roles get no role at all, which sees no data
    role = metadata.get("role")
    if role not in UserRole.list():
        role = None

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email,
        organization_id=metadata.get("organization_id"),
        role=role,
        full_name=metadata.get("full_name"),
    )


# ============================================================
# ORGANIZATION GUARDS
# ============================================================
def require_org_member(user: CurrentUser, organization_id: str):
    """Raise 403 unless the user belongs to the organization."""
    if not user.organization_id or user.organization_id != organization_id:
        raise HTTPException(
            status_code=403,
            detail="You do not belong to this organization",
        )


def require_org_admin(user: CurrentUser, organization_id: str):
    """Raise 403 unless the user is owner/admin of the organization."""
    require_org_member(user, organization_id)
    if not user.is_org_admin:
        raise HTTPException(
            status_code=403,
            detail="Owner or admin role required",
        )
