"""Authentication API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.api.cookies import clear_auth_cookies, read_refresh_token, set_auth_cookies
from app.api.dependencies import get_auth_service, get_current_identity
from .schemas import (
    AccountRegistrationRequest,
    AccountResponse,
    ChangePasswordRequest,
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegistrationResponse,
    ResetPasswordRequest,
    ResetTokenResponse,
    TokenResponse,
    VerifyEmailRequest,
)
from app.core.auth.entities import TokenPair, TokenPayload
from app.core.auth.exceptions import (
    AccountAlreadyExistsException,
    AccountLockedException,
    AccountNotFoundException,
    EmailNotVerifiedException,
    InactiveAccountException,
    InvalidCredentialsException,
    InvalidVerificationTokenException,
    NoPasswordSetException,
    PasswordMismatchException,
    RefreshTokenInvalidException,
)
from app.core.auth.services import AuthenticationService

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(token_pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=token_pair.access_token,
        refresh_token=token_pair.refresh_token,
        token_type=token_pair.token_type,
        expires_in=token_pair.expires_in,
    )


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new account",
    description="Create a new customer account with name, email, and password.",
    responses={
        201: {"description": "Account successfully created"},
        409: {"model": ErrorResponse, "description": "Account already exists"},
    },
)
async def register_account(
    account_data: AccountRegistrationRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> RegistrationResponse:
    """
    Register a new account.

    The account starts unverified; the returned verification token
    confirms the email address through `/auth/verify-email`.
    """
    try:
        account = await auth_service.register_account(
            name=account_data.name,
            email=account_data.email,
            password=account_data.password,
        )
    except AccountAlreadyExistsException:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account with this email already exists",
        )

    return RegistrationResponse(
        **AccountResponse.model_validate(account).model_dump(),
        verification_token=account.email_verification_token,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Account login",
    description="Authenticate with email and password; sets auth cookies.",
    responses={
        200: {"description": "Login successful"},
        400: {"model": ErrorResponse, "description": "Account cannot log in with a password"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        423: {"model": ErrorResponse, "description": "Account locked"},
    },
)
async def login(
    credentials: LoginRequest,
    response: Response,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Authenticate account and return JWT tokens.

    Three consecutive failures lock the account for 24 hours.
    """
    try:
        token_pair = await auth_service.authenticate(
            email=credentials.email,
            password=credentials.password,
        )
    except InvalidCredentialsException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    except AccountLockedException as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=e.message)
    except (NoPasswordSetException, EmailNotVerifiedException, InactiveAccountException) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    set_auth_cookies(response, token_pair)
    return _token_response(token_pair)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Rotate tokens",
    description="Exchange the current refresh token for a new token pair.",
    responses={
        200: {"description": "Tokens rotated successfully"},
        401: {"model": ErrorResponse, "description": "Invalid or expired refresh token"},
    },
)
async def refresh_tokens(
    request: Request,
    response: Response,
    body: Optional[RefreshTokenRequest] = None,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> TokenResponse:
    """
    Rotate the refresh token.

    The token is taken from the request body, or from the refresh cookie
    when the body carries none. The previous refresh token stops working.
    """
    token = (body.refresh_token if body else None) or read_refresh_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        token_pair = await auth_service.rotate_refresh_token(token)
    except (RefreshTokenInvalidException, InactiveAccountException) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_auth_cookies(response, token_pair)
    return _token_response(token_pair)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Invalidate the stored refresh token and clear auth cookies.",
    responses={
        200: {"description": "Logged out"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
)
async def logout(
    response: Response,
    identity: TokenPayload = Depends(get_current_identity),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.logout(identity.user_id)
    clear_auth_cookies(response)
    return MessageResponse(message="Logged out successfully")


@router.post(
    "/verify-email",
    response_model=AccountResponse,
    summary="Verify email address",
    responses={
        200: {"description": "Email verified"},
        400: {"model": ErrorResponse, "description": "Invalid or expired token"},
    },
)
async def verify_email(
    request: VerifyEmailRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> AccountResponse:
    try:
        account = await auth_service.verify_email(request.token)
    except InvalidVerificationTokenException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return AccountResponse.model_validate(account)


@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
    responses={
        200: {"description": "Password changed"},
        400: {"model": ErrorResponse, "description": "Current password is wrong"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
)
async def change_password(
    request: ChangePasswordRequest,
    identity: TokenPayload = Depends(get_current_identity),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        await auth_service.change_password(
            identity.user_id, request.current_password, request.new_password
        )
    except AccountNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except (NoPasswordSetException, PasswordMismatchException) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return MessageResponse(message="Password changed successfully")


@router.post(
    "/forgot-password",
    response_model=ResetTokenResponse,
    summary="Request password reset",
    responses={
        200: {"description": "Reset token generated"},
        404: {"model": ErrorResponse, "description": "Account not found"},
    },
)
async def forgot_password(
    request: ForgotPasswordRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> ResetTokenResponse:
    try:
        token = await auth_service.request_password_reset(request.email)
    except AccountNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Account with this email does not exist",
        )
    return ResetTokenResponse(message="Password reset token generated", reset_token=token)


@router.patch(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Reset password",
    responses={
        200: {"description": "Password reset"},
        400: {"model": ErrorResponse, "description": "Invalid or expired token"},
    },
)
async def reset_password(
    request: ResetPasswordRequest,
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> MessageResponse:
    try:
        await auth_service.reset_password(request.token, request.new_password)
    except InvalidVerificationTokenException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    return MessageResponse(message="Password reset successfully")


@router.get(
    "/me",
    response_model=AccountResponse,
    summary="Get current account",
    description="Get information about the currently authenticated account.",
    responses={
        200: {"description": "Account information retrieved"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
    },
)
async def get_current_account(
    identity: TokenPayload = Depends(get_current_identity),
    auth_service: AuthenticationService = Depends(get_auth_service),
) -> AccountResponse:
    """
    Get current authenticated account information.

    An expired access token is transparently renewed from the refresh
    cookie; the new access token is returned as a cookie.
    """
    try:
        account = await auth_service.get_account(identity.user_id)
    except AccountNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return AccountResponse.model_validate(account)
