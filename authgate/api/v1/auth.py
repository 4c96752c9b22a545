"""
Authentication endpoints untuk API v1.
Registrasi, login (email, MFA, telepon, Google), refresh token, logout,
setup MFA, dan reset password.
"""

from typing import Annotated, Union

from fastapi import APIRouter, Depends, Request, status

from authgate.api.dependencies.auth import CurrentPrincipal
from authgate.api.dependencies.rate_limit import (
    client_ip,
    forgot_password_rate_limit,
    login_rate_limit,
    phone_otp_rate_limit,
    refresh_rate_limit,
    register_rate_limit
)
from authgate.api.dependencies.services import get_auth_service, get_totp_service
from authgate.core.constants import ResponseMessage
from authgate.schemas.auth import (
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginEmailRequest,
    MfaLoginRequest,
    MfaRequiredResponse,
    MfaSetupResponse,
    MfaVerifyRequest,
    PhoneOtpRequest,
    PhoneOtpVerifyRequest,
    RefreshTokenRequest,
    RegisterEmailRequest,
    ResetPasswordRequest,
    TokenResponse
)
from authgate.schemas.response import ErrorResponse, MessageResponse
from authgate.services.auth import AuthService, MfaChallenge, RequestMetadata, TokenPair
from authgate.services.totp import TotpService

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse}
    }
)

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TotpServiceDep = Annotated[TotpService, Depends(get_totp_service)]


def request_metadata(request: Request) -> RequestMetadata:
    """Extract client info untuk event login."""
    return RequestMetadata(
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent", "unknown")
    )


def token_response(tokens: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
        expires_in=tokens.expires_in
    )


@router.post(
    "/register/email",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(register_rate_limit)]
)
async def register_with_email(
    payload: RegisterEmailRequest,
    auth_service: AuthServiceDep
) -> TokenResponse:
    """
    Registrasi akun baru dengan email dan password.

    Returns:
        Token pair session pertama

    Raises:
        ConflictError: Email sudah terdaftar (409)
    """
    tokens = await auth_service.register_with_email(payload.email, payload.password)
    return token_response(tokens)


@router.post(
    "/login/email",
    response_model=Union[TokenResponse, MfaRequiredResponse],
    dependencies=[Depends(login_rate_limit)]
)
async def login_with_email(
    payload: LoginEmailRequest,
    request: Request,
    auth_service: AuthServiceDep
) -> Union[TokenResponse, MfaRequiredResponse]:
    """
    Login dengan email dan password.

    Jika akun mengaktifkan MFA, response berisi `requiresMfa` dan `mfaToken`
    yang harus ditukar di /auth/login/mfa.
    """
    result = await auth_service.login_with_email(
        payload.email,
        payload.password,
        request_metadata(request)
    )
    if isinstance(result, MfaChallenge):
        return MfaRequiredResponse(requires_mfa=True, mfa_token=result.mfa_token)
    return token_response(result)


@router.post(
    "/login/mfa",
    response_model=TokenResponse,
    dependencies=[Depends(login_rate_limit)]
)
async def login_with_mfa(
    payload: MfaLoginRequest,
    request: Request,
    auth_service: AuthServiceDep
) -> TokenResponse:
    """Tukar MFA pending token dan kode TOTP dengan session."""
    tokens = await auth_service.verify_mfa_login(
        payload.mfa_token,
        payload.code,
        request_metadata(request)
    )
    return token_response(tokens)


@router.post(
    "/login/phone/request",
    response_model=MessageResponse,
    dependencies=[Depends(phone_otp_rate_limit)]
)
async def request_phone_otp(
    payload: PhoneOtpRequest,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """
    Kirim kode OTP via SMS.

    Raises:
        OtpRequestLimitException: Lebih dari 3 permintaan per jam untuk nomor ini (403)
    """
    await auth_service.request_phone_otp(payload.phone)
    return MessageResponse(message=ResponseMessage.OTP_SENT)


@router.post("/login/phone/verify", response_model=TokenResponse)
async def verify_phone_otp(
    payload: PhoneOtpVerifyRequest,
    request: Request,
    auth_service: AuthServiceDep
) -> TokenResponse:
    """Verifikasi kode OTP dan login (akun dibuat otomatis jika belum ada)."""
    tokens = await auth_service.verify_phone_otp(
        payload.phone,
        payload.code,
        request_metadata(request)
    )
    return token_response(tokens)


@router.post("/login/google", response_model=TokenResponse)
async def login_with_google(
    payload: GoogleLoginRequest,
    request: Request,
    auth_service: AuthServiceDep
) -> TokenResponse:
    """Login dengan Google ID token (akun dibuat otomatis jika belum ada)."""
    tokens = await auth_service.login_with_google(payload.id_token, request_metadata(request))
    return token_response(tokens)


@router.post(
    "/token/refresh",
    response_model=TokenResponse,
    dependencies=[Depends(refresh_rate_limit)]
)
async def refresh_tokens(
    payload: RefreshTokenRequest,
    auth_service: AuthServiceDep
) -> TokenResponse:
    """
    Rotasi refresh token. Token lama langsung tidak berlaku.

    Raises:
        TokenError: Token invalid, expired, atau sudah dipakai (401)
    """
    tokens = await auth_service.refresh_tokens(payload.refresh_token)
    return token_response(tokens)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    payload: RefreshTokenRequest,
    principal: CurrentPrincipal,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """Cabut session untuk satu refresh token. Selalu sukses."""
    await auth_service.logout(principal.account_id, payload.refresh_token)
    return MessageResponse(message=ResponseMessage.LOGOUT_SUCCESS)


@router.post("/logout/all", response_model=MessageResponse)
async def logout_all(
    principal: CurrentPrincipal,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """Cabut semua session akun di semua device."""
    removed = await auth_service.logout_all(principal.account_id)
    return MessageResponse(
        message=ResponseMessage.LOGOUT_ALL_SUCCESS,
        details={"sessions_revoked": removed}
    )


@router.post("/mfa/setup", response_model=MfaSetupResponse)
async def setup_mfa(
    principal: CurrentPrincipal,
    totp_service: TotpServiceDep
) -> MfaSetupResponse:
    """
    Stage TOTP secret baru. MFA belum aktif sampai /auth/mfa/verify sukses.

    Raises:
        ConflictError: MFA sudah aktif (409)
    """
    setup = await totp_service.setup(principal.account_id)
    return MfaSetupResponse(uri=setup["uri"], secret=setup["secret"], qr_code=setup["qr_code"])


@router.post("/mfa/verify", response_model=MessageResponse)
async def verify_mfa(
    payload: MfaVerifyRequest,
    principal: CurrentPrincipal,
    totp_service: TotpServiceDep
) -> MessageResponse:
    """
    Konfirmasi kode TOTP pertama dan aktifkan MFA.

    Raises:
        InvalidTwoFactorCodeException: Belum setup atau kode salah (401)
    """
    await totp_service.verify_and_enable(principal.account_id, payload.token)
    return MessageResponse(message=ResponseMessage.TWO_FACTOR_ENABLED)


@router.post(
    "/password/forgot",
    response_model=MessageResponse,
    dependencies=[Depends(forgot_password_rate_limit)]
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """Selalu mengembalikan pesan yang sama, terlepas dari keberadaan email."""
    message = await auth_service.forgot_password(payload.email)
    return MessageResponse(message=message)


@router.post("/password/reset", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthServiceDep
) -> MessageResponse:
    """
    Set password baru dan cabut semua session.

    Raises:
        TokenError: Token expired atau invalid (401)
    """
    await auth_service.reset_password(payload.token, payload.new_password)
    return MessageResponse(message=ResponseMessage.PASSWORD_RESET_SUCCESS)
