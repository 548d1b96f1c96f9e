"""
Security utilities: password hashing, session tokens, input sanitization
and document encryption
"""

import base64
import hashlib
import logging
import os
import re
import secrets
from typing import Optional

import bleach
from cryptography.fernet import Fernet, InvalidToken
from passlib.context import CryptContext

from .config import DOCUMENT_ENCRYPTION_KEY, SECRET_KEY

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against bcrypt hash"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# SESSION TOKENS
# ============================================================================


def generate_session_token() -> str:
    """Generate a cryptographically secure bearer token"""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """Tokens are stored hashed so a database leak does not leak sessions"""
    return hashlib.sha256(token.encode()).hexdigest()


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_text(value: Optional[str], max_length: int = 5000) -> Optional[str]:
    """Strip all markup from user text (chat messages, notes)"""
    if value is None:
        return None
    cleaned = bleach.clean(str(value), tags=[], attributes={}, strip=True).strip()
    return cleaned[:max_length]


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent directory traversal and other attacks
    """
    filename = os.path.basename(filename)
    filename = re.sub(r"[^\w\s\-\.]", "", filename)
    filename = filename.strip(". ")

    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[: 255 - len(ext)] + ext

    if not filename:
        filename = f"file_{secrets.token_hex(4)}"

    return filename


# ============================================================================
# DOCUMENT ENCRYPTION
# ============================================================================


def _document_key() -> bytes:
    if DOCUMENT_ENCRYPTION_KEY:
        return DOCUMENT_ENCRYPTION_KEY.encode()
    # Derive a valid 32-byte urlsafe key from SECRET_KEY
    digest = hashlib.sha256(SECRET_KEY.encode()).digest()
    return base64.urlsafe_b64encode(digest)


def get_cipher() -> Fernet:
    return Fernet(_document_key())


def encrypt_bytes(data: bytes) -> bytes:
    return get_cipher().encrypt(data)


def decrypt_bytes(token: bytes) -> bytes:
    """Decrypt document content; raises ValueError when the key does not match"""
    try:
        return get_cipher().decrypt(token)
    except InvalidToken as e:
        logger.error("❌ Failed to decrypt document content: invalid key or corrupted data")
        raise ValueError("Unable to decrypt document") from e
