from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from mezmurhub.core.config import Config
from mezmurhub.domain.auth import AuthError, AuthService, Session

from ..deps import get_auth_service, get_config, get_session_token, require_session
from ..schemas import LoginRequest, LoginResponse, UserInfo

router = APIRouter()


def _user_info(session: Session) -> UserInfo:
    return UserInfo(uid=session.uid, email=session.email, is_admin=session.is_admin)


@router.post("/auth/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    config: Config = Depends(get_config),
):
    """Sign in with email and password; the token is also set as a cookie."""
    try:
        session = auth.sign_in(request.email, request.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        logger.exception("Sign-in failed")
        raise HTTPException(status_code=500, detail=f"Failed to sign in: {str(e)}")

    response.set_cookie(
        config.auth.cookie_name,
        session.token,
        max_age=config.auth.session_ttl_hours * 3600,
        httponly=True,
        secure=config.auth.secure_cookies,
        samesite="lax",
    )
    return LoginResponse(
        token=session.token, expires_at=session.expires_at, user=_user_info(session)
    )


@router.post("/auth/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
    config: Config = Depends(get_config),
):
    signed_out = auth.sign_out(token)
    response.delete_cookie(config.auth.cookie_name)
    return {"success": signed_out}


@router.get("/auth/me", response_model=UserInfo)
async def me(session: Session = Depends(require_session)):
    return _user_info(session)
