"""Password hashing.

The store keeps whatever string it is given; hashing happens here, before
create_user is called, and verification happens at login."""

from passlib.hash import pbkdf2_sha256 as hasher


def hash_password(p: str) -> str:
    return hasher.hash(p)


def verify_password(p: str, h: str) -> bool:
    try:
        return hasher.verify(p, h)
    except ValueError:
        # Not a pbkdf2_sha256 hash at all, so it cannot match.
        return False
