from fastapi import APIRouter, Depends, Request, Response, status

from shortlink_app.api.rate_limit import WRITE_LIMIT, limiter
from shortlink_app.dependencies import get_bearer_token, get_identity_store
from shortlink_app.schemas.auth import AuthResponse, Credentials
from shortlink_app.services.identity_service import IdentityStore

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse)
@limiter.limit(WRITE_LIMIT)
async def register(
    request: Request,
    credentials: Credentials,
    identity: IdentityStore = Depends(get_identity_store)
):
    """Create an account and return its first token"""
    user_id, token = await identity.register(credentials.username, credentials.password)
    return AuthResponse(token=token, user_id=user_id)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(WRITE_LIMIT)
async def login(
    request: Request,
    credentials: Credentials,
    identity: IdentityStore = Depends(get_identity_store)
):
    """Exchange username and password for a new token"""
    user_id, token = await identity.login(credentials.username, credentials.password)
    return AuthResponse(token=token, user_id=user_id)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_bearer_token),
    identity: IdentityStore = Depends(get_identity_store)
):
    """Revoke the presented token"""
    await identity.revoke(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
