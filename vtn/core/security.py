"""
Security utilities for bearer tokens and client secret hashing
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from joserfc import jwt as jose_jwt
from joserfc.jwk import OctKey
from joserfc.errors import BadSignatureError, DecodeError, ExpiredTokenError, InvalidTokenError
from pwdlib import PasswordHash
from pwdlib.hashers.bcrypt import BcryptHasher
import structlog

from vtn.core.config import settings
from vtn.core.errors import Unauthorized
from vtn.core.identity import AuthRole, Identity

logger = structlog.get_logger()

# Client secret hashing context
pwd_context = PasswordHash((BcryptHasher(rounds=settings.BCRYPT_ROUNDS),))


def hash_secret(secret: str) -> str:
    """Hash a client secret for storage"""
    return pwd_context.hash(secret)


def verify_secret(secret: str, hashed: str) -> bool:
    """Check a client secret against its stored hash"""
    try:
        return pwd_context.verify(secret, hashed)
    except ValueError:
        logger.warning("Secret verification failed on malformed input")
        return False


class TokenManager:
    """
    Issues and verifies the bearer tokens carrying a client's roles.

    Verification yields the :class:`Identity` the data-access layer works with;
    nothing downstream looks at the token again.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "openadr-vtn",
        expire_minutes: int = 60,
    ) -> None:
        self._jwt_key = OctKey.import_key(secret_key)
        self._algorithm = algorithm
        self._issuer = issuer
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls) -> "TokenManager":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.AUTH_ISSUER,
            expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
        )

    def create_token(
        self,
        subject: str,
        roles: Iterable[AuthRole],
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create an access token

        Args:
            subject: Client id the token is issued to
            roles: Roles granted to the client
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))

        to_encode = {
            "sub": str(subject),
            "iss": self._issuer,
            "type": "access",
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
            "roles": [role.to_claim() for role in roles],
        }

        encoded_jwt = jose_jwt.encode({"alg": self._algorithm}, to_encode, self._jwt_key)

        logger.debug("Access token created", subject=subject, expires=expire)
        return encoded_jwt

    def decode(self, token: str) -> Identity:
        """Verify a token and return the identity it carries"""
        try:
            token_obj = jose_jwt.decode(token, self._jwt_key, algorithms=[self._algorithm])
        except (BadSignatureError, DecodeError, ExpiredTokenError, InvalidTokenError, ValueError) as exc:
            logger.warning("JWT verification failed", error=str(exc))
            raise Unauthorized("Could not validate credentials")

        payload = token_obj.claims

        if payload.get("type") != "access":
            logger.warning("Invalid token type", actual=payload.get("type"))
            raise Unauthorized("Invalid token type")

        if payload.get("iss") != self._issuer:
            logger.warning("Token issuer is not trusted", issuer=payload.get("iss"))
            raise Unauthorized("Untrusted token issuer")

        exp = payload.get("exp")
        if not exp or datetime.now(timezone.utc).timestamp() > exp:
            logger.warning("Token expired", subject=payload.get("sub"))
            raise Unauthorized("Token expired")

        identity = Identity.from_claims(payload)
        logger.debug("Token verified successfully", subject=identity.subject)
        return identity
