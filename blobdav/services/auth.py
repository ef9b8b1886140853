#!/usr/bin/env python3
"""
blobdav/services/auth.py
Basic authentication for the gateway
"""
import base64
import binascii
import hmac
import logging
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

BASIC_PREFIX = 'Basic '


def decode_basic(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """Split a ``Basic`` Authorization header into (user, password).

    Returns None for a missing header, another scheme, bad base64, non
    UTF-8 bytes, or a payload without a colon. The password is everything
    after the first colon, so it may contain colons itself.
    """
    if not header or not header.startswith(BASIC_PREFIX):
        return None

    encoded = header[len(BASIC_PREFIX):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode('utf-8')
    except (binascii.Error, ValueError):
        return None

    user, sep, password = decoded.partition(':')
    if not sep:
        return None
    return user, password


class AuthService:
    """Checks every request against one configured user/password pair.

    Nothing is remembered between requests.
    """

    def __init__(self, username: str, password: str, realm: str = 'Zotero WebDAV'):
        self.username = username
        self.password = password
        self.realm = realm

    def check(self, header: Optional[str]) -> bool:
        credentials = decode_basic(header)
        if credentials is None:
            return False

        user, password = credentials
        # evaluate both so timing does not reveal which one was wrong
        user_ok = hmac.compare_digest(user.encode('utf-8'), self.username.encode('utf-8'))
        pass_ok = hmac.compare_digest(password.encode('utf-8'), self.password.encode('utf-8'))
        if not (user_ok and pass_ok):
            logger.warning(f"Rejected credentials for user {user!r}")
            return False
        return True

    def challenge_headers(self) -> Dict[str, str]:
        return {'WWW-Authenticate': f'Basic realm="{self.realm}"'}
