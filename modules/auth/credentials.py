"""
Bearer credential signing and verification.

Credentials are HS256 JWTs signed with the process-wide secret
(Settings.jwt_secret). Verification is a pure function of the token, the
verification time and the secret.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings

from .exceptions import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    MissingTokenError,
)
from .models import Claims, CredentialPayload

logger = logging.getLogger(__name__)

# Expiry and issued-at are judged against the caller-supplied `now`,
# not the wall clock PyJWT would use.
_SIGNATURE_ONLY = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
}


class CredentialVerifier:
    """
    Verifies signed bearer credentials.

    Checks run in a fixed order: structure, expiry, signature. Expiry comes
    before the signature so an expired credential is reported as expired
    whatever its signature.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Credential secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialVerifier":
        return cls(settings.jwt_secret, settings.jwt_algorithm)

    def verify(self, raw_credential: str, now: Optional[datetime] = None) -> Claims:
        """Verify a credential and return its claims."""
        if not raw_credential:
            raise MissingTokenError()

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            # Naive times are taken as UTC, matching the claims.
            now = now.replace(tzinfo=timezone.utc)

        try:
            unverified = jwt.decode(raw_credential, options={"verify_signature": False})
        except jwt.DecodeError as e:
            logger.debug(f"Rejected malformed credential: {e}")
            raise MalformedTokenError()

        try:
            claims = Claims.from_payload(CredentialPayload(**unverified))
        except (PydanticValidationError, TypeError, ValueError, OverflowError, OSError) as e:
            logger.debug(f"Rejected credential with unusable claims: {e}")
            raise MalformedTokenError()

        if now >= claims.expires_at:
            raise ExpiredTokenError()

        try:
            jwt.decode(
                raw_credential,
                self._secret,
                algorithms=[self._algorithm],
                options=_SIGNATURE_ONLY,
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
            raise InvalidSignatureError()
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected credential during signature check: {e}")
            raise MalformedTokenError()

        return claims


class CredentialIssuer:
    """Signs credentials for ordinary users and for the reserved admin identity."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime_seconds: int = 3600,
        admin_subject_id: str = "admin",
    ):
        if not secret:
            raise ValueError("Credential secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = lifetime_seconds
        self._admin_subject_id = admin_subject_id

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialIssuer":
        return cls(
            settings.jwt_secret,
            settings.jwt_algorithm,
            settings.token_expire_seconds,
            settings.admin_subject_id,
        )

    def encode(self, claims: Claims) -> str:
        return jwt.encode(claims.to_payload(), self._secret, algorithm=self._algorithm)

    def issue(
        self,
        subject_id: str,
        email: str,
        display_name: str = "",
        is_admin: bool = False,
        now: Optional[datetime] = None,
        lifetime_seconds: Optional[int] = None,
    ) -> tuple[str, Claims]:
        """
        Sign a credential for a subject.

        Args:
            subject_id: User ID the credential identifies
            email: Email recorded in the credential
            display_name: Display name recorded in the credential
            is_admin: Admin flag; only honoured together with the admin subject id
            now: Issuance time (defaults to the current UTC time)
            lifetime_seconds: Override for the configured lifetime

        Returns:
            Tuple of (encoded token, claims it carries)
        """
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        lifetime = lifetime_seconds if lifetime_seconds is not None else self._lifetime
        claims = Claims(
            subject_id=subject_id,
            email=email,
            display_name=display_name,
            is_admin=is_admin,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=lifetime),
        )
        return self.encode(claims), claims

    def issue_admin(
        self,
        email: str,
        display_name: str,
        now: Optional[datetime] = None,
    ) -> tuple[str, Claims]:
        """Sign a credential for the reserved platform admin identity."""
        return self.issue(
            self._admin_subject_id,
            email,
            display_name,
            is_admin=True,
            now=now,
        )
