from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from timekeeper.core.database import get_db
from timekeeper.core.security import get_user_id_from_token
from timekeeper.core.exceptions import (
    AuthenticationError,
    InvalidTokenError,
    InsufficientPermissionsError,
    ResourceInactiveError
)
from timekeeper.auth.service import AuthService
from timekeeper.employees.models import Profile, Role, ADMIN_ROLES

# Security scheme
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Profile:
    """Resolve the bearer token to the caller's profile."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)

    auth_service = AuthService(db)
    user = auth_service.get_user_by_id(user_id)

    if not user or not user.profile:
        raise InvalidTokenError("User not found")

    if not user.is_active or not user.profile.is_active:
        raise ResourceInactiveError("User", str(user.id))

    return user.profile


def get_current_admin_user(current_user: Profile = Depends(get_current_user)) -> Profile:
    """Get current authenticated admin (or super admin)."""
    if current_user.role not in ADMIN_ROLES:
        raise InsufficientPermissionsError(
            detail="Administrator role required",
            error_data={"required_roles": list(ADMIN_ROLES), "user_role": current_user.role}
        )
    return current_user


def get_current_super_admin(current_user: Profile = Depends(get_current_user)) -> Profile:
    """Get current authenticated super admin."""
    if current_user.role != Role.SUPER_ADMIN:
        raise InsufficientPermissionsError(
            detail="Super administrator role required",
            error_data={"required_roles": [Role.SUPER_ADMIN.value], "user_role": current_user.role}
        )
    return current_user
