"""Short human-typable codes for sessions and course enrollment."""
import secrets
import string

CODE_ALPHABET = string.ascii_uppercase + string.digits

def generate_code(length: int = 6) -> str:
    """Random upper-case alphanumeric code (36-symbol alphabet)."""
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))

def normalize_code(raw) -> str:
    """Canonical form used for every code comparison."""
    if raw is None:
        return ''
    return str(raw).strip().upper()
