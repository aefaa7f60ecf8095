import base64
import secrets

DEFAULT_TOKEN_BYTES = 32
MIN_TOKEN_BYTES = 32  # 256 bits of entropy


class IdGenerationError(RuntimeError):
    """Raised when the OS randomness source cannot be read.

    This is not a per-request failure: without secure randomness no new
    session may be issued.
    """


def new_id(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """
    Generate a URL-safe session identifier.

    Args:
        nbytes: Number of random bytes to draw (at least 32)

    Returns:
        Base64url string without padding (43 characters for 32 bytes)

    Raises:
        ValueError: If nbytes is below the entropy floor
        IdGenerationError: If the randomness source is unavailable
    """
    if nbytes < MIN_TOKEN_BYTES:
        raise ValueError(f"nbytes must be at least {MIN_TOKEN_BYTES}, got {nbytes}")

    try:
        raw = secrets.token_bytes(nbytes)
    except (NotImplementedError, OSError) as e:
        raise IdGenerationError(f"Secure randomness source unavailable: {e}") from e

    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
