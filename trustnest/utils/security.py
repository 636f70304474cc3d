"""
Security utilities for input sanitization and document encryption
"""
import html
import re

import bleach
from cryptography.fernet import Fernet, InvalidToken

from trustnest.errors import StorageError

# HTML tags allowed in user content
ALLOWED_HTML_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br']

ENCRYPTION_ALGORITHM = 'fernet-aes128-cbc-hmac-sha256'


def sanitize_input(text, allow_html=False):
    """Sanitize user input to prevent XSS"""
    if not text:
        return text

    if allow_html:
        text = bleach.clean(text, tags=ALLOWED_HTML_TAGS, strip=True)
    else:
        text = html.escape(text)

    return text.replace('\x00', '')


def strip_html(text):
    """Remove all HTML tags from text"""
    if not text:
        return text
    return bleach.clean(str(text), tags=[], strip=True)


def build_fernet(key):
    if isinstance(key, str):
        key = key.encode()
    return Fernet(key)


def encrypt_document(data, fernet):
    """Encrypt raw document bytes; output carries its own IV and HMAC"""
    return fernet.encrypt(data)


def decrypt_document(token, fernet):
    """Decrypt document bytes, failing loudly on tampered ciphertext"""
    try:
        return fernet.decrypt(token)
    except InvalidToken as e:
        raise StorageError("Stored document failed integrity check") from e


def sanitize_filename(filename):
    """Sanitize filename for safe storage"""
    if not filename:
        return 'unknown'

    # Remove path components
    filename = filename.split('/')[-1].split('\\')[-1]

    # Remove dangerous characters
    filename = re.sub(r'[^\w\-_\.]', '', filename)

    # Limit length
    if len(filename) > 100:
        name, ext = filename.rsplit('.', 1) if '.' in filename else (filename, '')
        filename = name[:95] + ('.' + ext if ext else '')

    return filename or 'unknown'
