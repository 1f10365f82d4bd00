"""
Filename utility functions for download responses.

This module provides utilities for:
- Sanitizing video titles into filenames
- Encoding filenames for Content-Disposition headers
"""

import unicodedata
from urllib.parse import quote


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to be safe for filesystem while preserving Unicode."""
    # Normalize Unicode characters
    filename = unicodedata.normalize('NFC', filename)
    # Replace path separators and other problematic characters
    filename = filename.replace('/', '-').replace('\\', '-')
    filename = filename.replace(':', '-').replace('*', '-')
    filename = filename.replace('?', '-').replace('"', '-')
    filename = filename.replace('<', '-').replace('>', '-')
    filename = filename.replace('|', '-').replace('\0', '-')
    filename = ''.join(ch for ch in filename if ch.isprintable())
    # Remove leading/trailing spaces and dots
    filename = filename.strip('. ')
    # Limit length to prevent filesystem issues
    if len(filename) > 200:
        filename = filename[:200]
    return filename or 'audio'


def create_audio_filename(title: str, extension: str = 'mp3') -> str:
    """Create "{sanitized title}.{ext}" for an audio download."""
    return f"{sanitize_filename(title or '')}.{extension}"


def encode_rfc5987_value(value: str) -> str:
    """
    Percent-encode a header parameter value per RFC 5987.

    Everything outside the attr-char set is escaped, including ' ( ) and *.
    """
    return quote(value, safe="!#$&+-.^_`|~")


def encode_content_disposition_filename(filename: str) -> str:
    """Encode filename for Content-Disposition header following RFC 5987."""
    # For ASCII filenames, use simple format
    try:
        filename.encode('ascii')
        # Escape quotes for the simple format
        safe_filename = filename.replace('\\', '\\\\').replace('"', '\\"')
        return f'attachment; filename="{safe_filename}"'
    except UnicodeEncodeError:
        # For Unicode filenames, use RFC 5987 encoding
        encoded_filename = encode_rfc5987_value(filename)
        # Also provide ASCII fallback
        ascii_filename = unicodedata.normalize('NFD', filename)
        ascii_filename = ascii_filename.encode('ascii', 'ignore').decode('ascii').strip()
        ascii_filename = ascii_filename.replace('\\', '\\\\').replace('"', '\\"')
        if not ascii_filename or ascii_filename.startswith('.'):
            ascii_filename = 'audio' + ascii_filename
        return f'attachment; filename="{ascii_filename}"; filename*=UTF-8\'\'{encoded_filename}'
