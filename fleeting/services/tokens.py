import secrets
import string

ALPHABET = string.ascii_letters


def generate(length: int) -> str:
    """Return ``length`` letters drawn uniformly from a-z and A-Z.

    The result is short enough to type by hand, so it is not unique by
    construction; callers insert it and regenerate on a collision.
    """
    if length <= 0:
        raise ValueError("token length must be positive")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
