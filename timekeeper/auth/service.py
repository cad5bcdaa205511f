from sqlalchemy.orm import Session
from timekeeper.auth.models import User
from timekeeper.auth.schemas import UserLogin
from timekeeper.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token
)
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import (
    AuthenticationError,
    InvalidTokenError,
    ResourceNotFoundError,
    ResourceInactiveError
)
from typing import Optional
import uuid


class AuthService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_user(self, email: str, password: str, user_id=None) -> User:
        """Add a platform identity to the session; the caller commits."""
        self.check_unique_constraint(User, "email", email, "User")

        db_user = User(
            id=user_id or uuid.uuid4(),
            email=email,
            password_hash=get_password_hash(password)
        )
        self.db.add(db_user)
        return db_user

    def authenticate_user(self, login_data: UserLogin) -> User:
        """Authenticate user with email and password."""
        user = self.get_user_by_email(login_data.email)

        if not user:
            self.log_service_action("failed_login_attempt", extra_data={"email": login_data.email, "reason": "user_not_found"})
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            self.log_service_action("failed_login_attempt", extra_data={"email": login_data.email, "reason": "user_inactive"})
            raise ResourceInactiveError("User", str(user.id))

        if not verify_password(login_data.password, user.password_hash):
            self.log_service_action("failed_login_attempt", extra_data={"email": login_data.email, "reason": "invalid_password"})
            raise AuthenticationError("Invalid email or password")

        self.log_service_action("successful_login", "User", str(user.id))
        return user

    def get_user_by_id(self, user_id) -> Optional[User]:
        """Get user by ID; malformed ids are treated as unknown users."""
        if not isinstance(user_id, uuid.UUID):
            try:
                user_id = uuid.UUID(str(user_id))
            except ValueError:
                return None
        try:
            return self.get_or_404(User, user_id, "User")
        except ResourceNotFoundError:
            return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create_tokens(self, user: User) -> dict:
        """Create access and refresh tokens for user."""
        access_token = create_access_token(data={"sub": str(user.id)})
        refresh_token = create_refresh_token(data={"sub": str(user.id)})

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer"
        }

    def refresh_tokens(self, refresh_token: str) -> dict:
        payload = verify_token(refresh_token, "refresh")
        user = self.get_user_by_id(payload.get("sub"))

        if not user or not user.is_active:
            raise InvalidTokenError("User not found or inactive")

        return self.create_tokens(user)
