from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from printshop.core.exceptions import Forbidden, Unauthenticated


class PasswordHasher:
    """
    bcrypt hashing with a fixed cost factor.

    CryptContext generates a per-hash salt and compares in constant time.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return self._context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        """Burn one verification so unknown emails cost the same as wrong passwords"""
        self._context.dummy_verify()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    email: str


class SessionIssuer:
    """
    Mints and checks stateless session tokens.

    Tokens are HS256 JWTs carrying the user id in the standard 'sub' claim,
    the email, and iat/exp. Nothing is stored server-side, so a token stays
    valid until it expires, even after the user changes their password.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock or _utcnow

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: int, email: str) -> str:
        """Create a signed token for a verified user"""
        issued_at = self._clock()
        expires_at = issued_at + self._ttl
        claims = {
            "sub": str(user_id),
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> SessionClaims:
        """
        Check a token and return the identity it carries.

        Missing or structurally broken tokens raise Unauthenticated (401).
        Tokens that parse but fail the signature check or have expired
        raise Forbidden (403).
        """
        if not token:
            raise Unauthenticated()

        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            raise Unauthenticated("Malformed session token")

        try:
            # Expiry is checked below against our own clock
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise Forbidden("Invalid session token")

        user_id_str = payload.get("sub")
        email = payload.get("email")
        expires_at = payload.get("exp")
        if not isinstance(email, str) or not isinstance(expires_at, (int, float)):
            raise Unauthenticated("Malformed session token")
        try:
            user_id = int(user_id_str)
        except (ValueError, TypeError):
            raise Unauthenticated("Malformed session token")

        if self._clock().timestamp() > expires_at:
            raise Forbidden("Session expired")

        return SessionClaims(user_id=user_id, email=email)
