from fastapi import HTTPException, Request

from .encryption import CipherContext


def get_cipher(request: Request) -> CipherContext:
    """FastAPI dependency returning the process-wide CipherContext."""
    cipher = getattr(request.app.state, "cipher", None)
    if cipher is None:
        raise HTTPException(status_code=503, detail="Cipher context not initialized")
    return cipher
