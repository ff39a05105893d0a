import logging
from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature
from biblio.configs import SEED

logger = logging.getLogger(__name__)

SERIALIZER = None  # Will be initialized lazily
COOKIE_TTL = 604800

ADMIN = "admin"
MEMBER = "member"
ROLES = (ADMIN, MEMBER)


def _get_serializer():
    """Get or initialize the SERIALIZER lazily."""
    global SERIALIZER
    if SERIALIZER is None:
        SERIALIZER = URLSafeTimedSerializer(SEED, salt="auth-cookie")
    return SERIALIZER


def create_session_cookie(subject, role: str = ADMIN) -> str:
    """Returns a signed session cookie naming `subject` with `role`.

    Sign-in lives outside this service; operators and tests use this to
    mint the cookie the service verifies.
    """
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    return _get_serializer().dumps({"sub": subject, "role": role})


def verify_session_cookie(session) -> Optional[dict]:
    """Returns the signed identity as {"sub", "role"}, or None."""
    if not session:
        return None
    try:
        data = _get_serializer().loads(session, max_age=COOKIE_TTL)
    except BadSignature:
        logger.info("Rejected session cookie with bad or expired signature")
        return None
    if not isinstance(data, dict) or data.get("role") not in ROLES:
        return None
    return data


def is_admin(identity: Optional[dict]) -> bool:
    return bool(identity) and identity.get("role") == ADMIN
