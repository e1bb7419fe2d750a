# =============================================================================
# app/auth/verifier.py - Identity Provider Token Verification
# =============================================================================
# Verifies Firebase Authentication ID tokens without the Admin SDK:
# - RS256 tokens are checked against Google's published JWKS (cached)
# - HS256 tokens are accepted only when AUTH_JWT_SECRET is configured
#   (local development, tests)
#
# Audience must be the Firebase project id and issuer
# https://securetoken.google.com/<project-id>.
#
# One IdentityVerifier is built at startup (see app.main lifespan), stored on
# app.state and handed to request handlers through a dependency.
# =============================================================================

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from app.config import Settings
from app.exceptions import InvalidCredentialError

logger = logging.getLogger(__name__)

JWKS_CACHE_TTL = 3600  # 1 hour
ASYMMETRIC_ALGORITHMS = ("RS256",)


@dataclass(frozen=True)
class VerifiedIdentity:
    """Claims we trust after a token passed verification."""
    uid: str
    email: str | None = None
    name: str | None = None
    claims: dict[str, Any] = field(default_factory=dict, compare=False)


class IdentityVerifier:
    """
    Verifies bearer tokens issued by the identity provider.

    Args:
        project_id: Firebase project id (expected audience)
        jwks_url: Where to fetch public signing keys
        shared_secret: Optional HS256 secret; HS256 tokens are rejected without it
        http_client: httpx client used for JWKS fetches
        cache_ttl: Seconds a fetched key set stays fresh
    """

    def __init__(
        self,
        project_id: str,
        jwks_url: str,
        shared_secret: str | None = None,
        http_client: httpx.Client | None = None,
        cache_ttl: int = JWKS_CACHE_TTL,
    ):
        self.project_id = project_id
        self.issuer = f"https://securetoken.google.com/{project_id}"
        self.jwks_url = jwks_url
        self.shared_secret = shared_secret
        self.cache_ttl = cache_ttl
        self._http = http_client or httpx.Client(timeout=10)
        self._jwks: dict[str, Any] = {}
        self._jwks_time: float = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityVerifier":
        return cls(
            project_id=settings.FIREBASE_PROJECT_ID,
            jwks_url=settings.FIREBASE_JWKS_URL,
            shared_secret=settings.AUTH_JWT_SECRET,
            http_client=httpx.Client(timeout=settings.DB_TIMEOUT_SECONDS),
        )

    def close(self) -> None:
        self._http.close()

    # -------------------------------------------------------------------------
    # Key Resolution
    # -------------------------------------------------------------------------

    def _fetch_jwks(self, force: bool = False) -> dict[str, Any]:
        """Fetch the JWKS, serving the cached copy while it is fresh."""
        now = time.time()
        if not force and self._jwks and (now - self._jwks_time) < self.cache_ttl:
            return self._jwks

        try:
            response = self._http.get(self.jwks_url)
            response.raise_for_status()
            self._jwks = response.json()
            self._jwks_time = now
            logger.debug(f"Fetched JWKS from {self.jwks_url}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch JWKS: {e}")
            # Serve a stale key set rather than failing every request
            if not self._jwks:
                return {"keys": []}
        return self._jwks

    def _find_key(self, kid: str) -> dict[str, Any] | None:
        for key in self._fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key

        # Google rotates keys; refetch once before giving up
        for key in self._fetch_jwks(force=True).get("keys", []):
            if key.get("kid") == kid:
                return key
        return None

    def _signing_key(self, token: str) -> tuple[Any, str]:
        """
        Get the key and algorithm a token must be verified with.

        Raises:
            InvalidCredentialError: Unknown algorithm or key id
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise InvalidCredentialError("Malformed token")

        alg = header.get("alg")

        if alg == "HS256":
            if not self.shared_secret:
                raise InvalidCredentialError("Unsupported token algorithm")
            return self.shared_secret, alg

        if alg in ASYMMETRIC_ALGORITHMS:
            kid = header.get("kid")
            key = self._find_key(kid) if kid else None
            if key is None:
                logger.warning(f"No signing key for kid={kid}")
                raise InvalidCredentialError("Unknown signing key")
            return key, alg

        raise InvalidCredentialError("Unsupported token algorithm")

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify(self, token: str) -> VerifiedIdentity:
        """
        Verify a bearer token and return the identity it carries.

        Raises:
            InvalidCredentialError: Bad signature, wrong audience/issuer,
                expired, or missing subject
        """
        if not token:
            raise InvalidCredentialError("Invalid token")

        key, algorithm = self._signing_key(token)

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=[algorithm],
                audience=self.project_id,
                issuer=self.issuer,
            )
        except ExpiredSignatureError:
            logger.warning("ID token has expired")
            raise InvalidCredentialError("Token has expired")
        except JWTError as e:
            logger.warning(f"ID token validation failed: {e}")
            raise InvalidCredentialError("Invalid token")

        uid = claims.get("sub") or claims.get("user_id")
        if not uid:
            logger.warning("ID token missing 'sub' claim")
            raise InvalidCredentialError("Invalid token: missing user ID")

        return VerifiedIdentity(
            uid=uid,
            email=claims.get("email"),
            name=claims.get("name"),
            claims=claims,
        )
