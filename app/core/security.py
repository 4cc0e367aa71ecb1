"""
Security utilities: password hashing and session token generation
"""
import logging
import secrets
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Hashing goes straight to argon2/bcrypt; passlib is only used to verify
# hashes written by older deployments.
argon2_available = False
bcrypt_available = False

try:
    import argon2
    hasher = argon2.PasswordHasher()
    if hasher.verify(hasher.hash("test"), "test"):
        argon2_available = True
        logger.info("Argon2 backend is available")
except Exception as e:
    logger.warning(f"Argon2 backend not available: {e}")

try:
    import bcrypt
    if bcrypt.checkpw(b"test", bcrypt.hashpw(b"test", bcrypt.gensalt())):
        bcrypt_available = True
        logger.info("Bcrypt backend is available")
except Exception as e:
    logger.warning(f"Bcrypt backend not available: {e}")

if not argon2_available and not bcrypt_available:
    error_msg = "No password hashing backends available. Please install argon2-cffi or bcrypt."
    logger.critical(error_msg)
    raise RuntimeError(error_msg)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# 48 random bytes, url-safe base64 encoded (64 characters)
SESSION_TOKEN_BYTES = 48


def hash_password(password: str) -> str:
    """Hash a password using available backend (argon2 preferred, bcrypt fallback)"""
    if argon2_available:
        try:
            return argon2.PasswordHasher().hash(password)
        except Exception as e:
            logger.warning(f"Argon2 hashing failed, falling back to bcrypt: {e}")

    if bcrypt_available:
        # Bcrypt only looks at the first 72 bytes
        password_bytes = password.encode('utf-8')[:72]
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode('utf-8')

    raise RuntimeError("No hashing backends available")


def validate_password(password: str) -> str:
    """
    Validate and normalize password for hashing

    Args:
        password: Raw password string

    Returns:
        Normalized password (trimmed)

    Raises:
        ValueError: If password is invalid with specific error message
    """
    if password is None:
        raise ValueError("Password is required")

    password = password.strip()

    if not password:
        raise ValueError("Password cannot be empty")

    if len(password) < 6:
        raise ValueError("Password must be at least 6 characters")

    if len(password.encode('utf-8')) > 72:
        raise ValueError("Password cannot be longer than 72 bytes when encoded as UTF-8")

    return password


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    if not hashed_password:
        return False

    if argon2_available and hashed_password.startswith('$argon2'):
        try:
            return argon2.PasswordHasher().verify(hashed_password, plain_password)
        except Exception:
            return False

    if bcrypt_available:
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except Exception:
            pass

    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False


def generate_session_token() -> str:
    """Create an opaque, unguessable bearer token for a staff session"""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
