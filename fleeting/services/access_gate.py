"""Authorization for every resource route.

A request is let through when any of these holds, checked in order:

1. its signed session already carries the ``loggedin`` marker;
2. it presents a token (``X-Authorization`` header or ``authorization``
   query parameter) whose SHA-256 digest names a stored credential;
3. it is addressed to the secret share domain, in which case the effective
   host becomes the public share hostname;
4. no administrator exists yet, in which case one is bootstrapped.

Anything else is rejected. Interactive clients that pass checks 2 or 4 get
the session marker so later requests skip the lookup. The marker only saves
a lookup; it does not widen who gets in.
"""
import logging
import os

from fastapi import Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fleeting.database import get_db
from fleeting.errors import Unauthorized
from fleeting.models.user import ADMIN_KEY, User
from fleeting.services import tokens
from fleeting.services.password_hasher import PasswordHasher, token_digest

logger = logging.getLogger(__name__)

SESSION_MARKER = "loggedin"
BOOTSTRAP_SECRET_LENGTH = 32


def non_interactive_markers() -> list[str]:
    raw = os.getenv("NON_INTERACTIVE_AGENTS", "curl,wget")
    return [m.strip().lower() for m in raw.split(",") if m.strip()]


def presented_token(request: Request) -> str:
    return request.headers.get("x-authorization") or request.query_params.get("authorization") or ""


class AccessGate:
    def __init__(self, db_session: Session, hasher: PasswordHasher | None = None):
        self.db_session = db_session
        self.hasher = hasher or PasswordHasher()

    def check(self, request: Request) -> None:
        """Return when the request may proceed, raise Unauthorized otherwise."""
        request.state.effective_host = request.headers.get("host", request.url.netloc)

        if request.session.get(SESSION_MARKER):
            return

        token = presented_token(request)
        if token:
            if self.db_session.get(User, token_digest(token)) is None:
                logger.info("Rejected unknown token from %s", _client(request))
                raise Unauthorized("Invalid authorization token")
        elif os.getenv("SECRET_DOMAIN") and request.state.effective_host == os.getenv("SECRET_DOMAIN"):
            request.state.effective_host = os.getenv("SHARE_HOSTNAME", "")
            return
        elif self.bootstrap_admin() is None:
            logger.info("Rejected anonymous request from %s", _client(request))
            raise Unauthorized("Authorization required")

        user_agent = request.headers.get("user-agent", "").lower()
        if not any(marker in user_agent for marker in non_interactive_markers()):
            request.session[SESSION_MARKER] = True

    def bootstrap_admin(self) -> str | None:
        """Create the administrator credential if none exists yet.

        Returns the plaintext secret when this call created it, None when an
        administrator was already present (including one created
        concurrently by another request).
        """
        if self.db_session.get(User, ADMIN_KEY) is not None:
            return None

        secret = os.getenv("ADMIN_PASS") or tokens.generate(BOOTSTRAP_SECRET_LENGTH)
        password_hash, salt = self.hasher.hash(secret)
        email = os.getenv("ADMIN_EMAIL", "admin@localhost")
        for key in (ADMIN_KEY, token_digest(secret)):
            self.db_session.add(User(key=key, email=email, password_hash=password_hash, salt=salt))
        try:
            self.db_session.commit()
        except IntegrityError:
            self.db_session.rollback()
            return None

        if os.getenv("ADMIN_PASS"):
            logger.warning("Bootstrapped administrator %s from ADMIN_PASS", email)
        else:
            logger.warning(
                "Bootstrapped administrator %s; authorization token: %s", email, secret
            )
        return secret


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def require_access(request: Request, db: Session = Depends(get_db)) -> None:
    AccessGate(db).check(request)


def public_base_url(request: Request) -> str:
    host = getattr(request.state, "effective_host", None) or request.url.netloc
    return f"{request.url.scheme}://{host}"
