"""
Services module untuk AuthGate API.
Berisi business logic layer.
"""

from authgate.services.auth import AuthService, MfaChallenge, RequestMetadata, TokenPair
from authgate.services.events import EventBus, AccountRegistered, LoginSucceeded, LoginFailed
from authgate.services.fraud import FraudSignalProcessor
from authgate.services.google import GoogleIdentityVerifier, VerifiedIdentity
from authgate.services.notifications import NotificationDispatcher
from authgate.services.otp import OtpService
from authgate.services.rate_limit import RateLimitService
from authgate.services.totp import TotpService

__all__ = [
    "AuthService",
    "MfaChallenge",
    "RequestMetadata",
    "TokenPair",
    "EventBus",
    "AccountRegistered",
    "LoginSucceeded",
    "LoginFailed",
    "FraudSignalProcessor",
    "GoogleIdentityVerifier",
    "VerifiedIdentity",
    "NotificationDispatcher",
    "OtpService",
    "RateLimitService",
    "TotpService",
]
