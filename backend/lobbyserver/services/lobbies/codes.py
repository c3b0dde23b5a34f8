import random
import string

LOBBY_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_lobby_code(length: int = 6) -> str:
    """Generate a short, shareable lobby code."""
    return ''.join(random.choices(LOBBY_CODE_ALPHABET, k=length))
