from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from timekeeper.core.database import get_db
from timekeeper.auth.schemas import UserLogin, CurrentUserResponse, Token, RefreshTokenRequest
from timekeeper.auth.service import AuthService
from timekeeper.core.dependencies import get_current_user

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/login", response_model=Token)
async def login_user(login_data: UserLogin, db: Session = Depends(get_db)):
    """Login user and return JWT tokens."""
    auth_service = AuthService(db)
    user = auth_service.authenticate_user(login_data)
    return auth_service.create_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    """Refresh access token using refresh token."""
    return AuthService(db).refresh_tokens(request.refresh_token)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(current_user=Depends(get_current_user)):
    """Get the caller's profile."""
    return current_user
