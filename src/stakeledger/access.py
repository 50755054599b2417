"""Owner check for restricted operations."""

from .errors import Unauthorized


def require_owner(owner: str, caller: str) -> None:
    """Raise ``Unauthorized`` unless ``caller`` is ``owner``."""
    if caller != owner:
        raise Unauthorized(f"{caller!r} is not the owner")
