from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import AppSettings, get_app_settings
from app.db.database import get_db
from app.models.users import Users
from app.schemas.base import ApiResponse, api_response
from app.schemas.token import RefreshTokenRequest, Token
from app.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    UpdateAccountRequest,
    UserResponse,
    WatchHistoryResponse,
)
from app.services.storage_service import BlobStorage, get_blob_storage
from app.services.token_service import TokenService, get_token_service
from app.services.user_service import UserService
from app.services.view_service import ViewService
from app.utils.security import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_current_user
from app.utils.uploads import staged_upload

users_router = APIRouter()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str, settings: AppSettings) -> None:
    for name, value in ((ACCESS_TOKEN_COOKIE, access_token), (REFRESH_TOKEN_COOKIE, refresh_token)):
        response.set_cookie(
            name,
            value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


def _clear_auth_cookies(response: Response, settings: AppSettings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, httponly=True, secure=settings.cookie_secure, samesite="lax")


@users_router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    username: Optional[str] = Form(None),
    fullname: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    settings: AppSettings = Depends(get_app_settings),
):
    max_bytes = settings.max_upload_mb * 1024 * 1024
    async with staged_upload(avatar, settings.upload_temp_dir, max_bytes) as avatar_file:
        async with staged_upload(cover, settings.upload_temp_dir, max_bytes) as cover_file:
            user = await UserService(db, storage=storage).register(
                username=username,
                fullname=fullname,
                email=email,
                password=password,
                avatar=avatar_file,
                cover=cover_file,
            )
    return api_response(UserResponse.model_validate(user), "User registration successful", status.HTTP_201_CREATED)


@users_router.post("/login", response_model=ApiResponse[LoginResponse])
async def login_user(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
    settings: AppSettings = Depends(get_app_settings),
):
    user, access_token, refresh_token = await UserService(db, token_service=token_service).login(
        payload.username, payload.email, payload.password
    )
    _set_auth_cookies(response, access_token, refresh_token, settings)
    data = LoginResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        refresh_token=refresh_token,
    )
    return api_response(data, "User logged in successfully")


@users_router.post("/refresh-token", response_model=ApiResponse[Token])
async def refresh_access_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
    settings: AppSettings = Depends(get_app_settings),
):
    presented = request.cookies.get(REFRESH_TOKEN_COOKIE) or (payload.refresh_token if payload else None)
    _, access_token, refresh_token = await UserService(db, token_service=token_service).refresh_tokens(presented)
    _set_auth_cookies(response, access_token, refresh_token, settings)
    return api_response(
        Token(access_token=access_token, refresh_token=refresh_token),
        "Access token refreshed",
    )


@users_router.post("/logout", response_model=ApiResponse[dict])
async def logout_user(
    response: Response,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    settings: AppSettings = Depends(get_app_settings),
):
    await UserService(db).logout(current_user)
    _clear_auth_cookies(response, settings)
    return api_response({}, "User logged out successfully")


@users_router.post("/change-password", response_model=ApiResponse[dict])
async def change_password(
    payload: ChangePasswordRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).change_password(current_user, payload.old_password, payload.new_password)
    return api_response({}, "Password changed successfully")


@users_router.get("/current-user", response_model=ApiResponse[UserResponse])
async def get_current_user_details(current_user: Users = Depends(get_current_user)):
    return api_response(UserResponse.model_validate(current_user), "Current user fetched successfully")


@users_router.patch("/update-account", response_model=ApiResponse[UserResponse])
async def update_account_details(
    payload: UpdateAccountRequest,
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).update_account(current_user, payload.fullname, payload.email)
    return api_response(UserResponse.model_validate(user), "Account details updated successfully")


@users_router.patch("/update-images", response_model=ApiResponse[UserResponse])
async def update_account_images(
    avatar: Optional[UploadFile] = File(None),
    cover: Optional[UploadFile] = File(None),
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    settings: AppSettings = Depends(get_app_settings),
):
    max_bytes = settings.max_upload_mb * 1024 * 1024
    async with staged_upload(avatar, settings.upload_temp_dir, max_bytes) as avatar_file:
        async with staged_upload(cover, settings.upload_temp_dir, max_bytes) as cover_file:
            user = await UserService(db, storage=storage).update_images(current_user, avatar_file, cover_file)
    return api_response(UserResponse.model_validate(user), "Account images updated successfully")


@users_router.get("/watch-history", response_model=ApiResponse[WatchHistoryResponse])
async def get_watch_history(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    history = await ViewService(db).watch_history(current_user.id)
    return api_response(history, "Watch history fetched successfully")


@users_router.delete("/watch-history", response_model=ApiResponse[dict])
async def clear_watch_history(
    current_user: Users = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    removed = await UserService(db).clear_watch_history(current_user.id)
    return api_response({"removed": removed}, "Watch history cleared")
