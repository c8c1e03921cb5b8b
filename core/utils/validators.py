"""Validation utilities for slugs, identifiers and filenames."""

import re

SLUG_MAX_LENGTH = 100

# cuid-shaped identifiers: "c" followed by lowercase base-36 characters
ID_PATTERN = re.compile(r'^c[a-z0-9]{20,32}$')


def is_valid_id(value: str) -> bool:
    """Check whether a value looks like a resource identifier."""
    return bool(value) and bool(ID_PATTERN.match(value))


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename by removing dangerous characters.
    
    Args:
        filename: Original filename
        
    Returns:
        Sanitized filename
    """
    # Drop any directory component sent by the client
    filename = re.split(r'[\\/]', filename)[-1]
    
    sanitized = re.sub(r'[<>:"|?*\x00-\x1f]', '', filename)
    sanitized = sanitized.replace(' ', '_')
    
    if len(sanitized) > 200:
        name, ext = sanitized.rsplit('.', 1) if '.' in sanitized else (sanitized, '')
        sanitized = name[:190] + ('.' + ext if ext else '')
    
    return sanitized or "file"
