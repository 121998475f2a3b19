# backend/phishlens/routers/auth.py
from fastapi import APIRouter, Depends, Request

from ..errors import NotAuthenticated, NotFound, ValidationError
from ..schemas import AuthResponse, LoginBody, MessageResponse, RegisterBody, UserResponse
from ..security import end_session, get_store, session_user_id, start_session
from ..services import credentials
from ..services.store import Store

router = APIRouter()


@router.post("/register", response_model=AuthResponse)
async def register(body: RegisterBody, request: Request, store: Store = Depends(get_store)):
    if not body.email or not body.password or not body.name:
        raise ValidationError("Email, password, and name are required")

    cfg = request.app.state.settings
    account = await credentials.register(
        store, body.email, body.password, body.name, rounds=cfg.BCRYPT_ROUNDS
    )
    start_session(request, account)
    return {"message": "User registered successfully", "user": account.public()}


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginBody, request: Request, store: Store = Depends(get_store)):
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    cfg = request.app.state.settings
    account = await credentials.login(store, body.email, body.password, rounds=cfg.BCRYPT_ROUNDS)
    start_session(request, account)
    return {"message": "Login successful", "user": account.public()}


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    end_session(request)
    return {"message": "Logout successful"}


@router.get("/me", response_model=UserResponse)
async def me(request: Request, store: Store = Depends(get_store)):
    user_id = session_user_id(request)
    if not user_id:
        raise NotAuthenticated()

    account = await store.get_account(user_id)
    if account is None:
        raise NotFound("User not found")
    return {"user": account.public()}
