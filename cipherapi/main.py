import sys
import argparse
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import DEFAULT_ADDR, Settings, load_env_file
from .encryption import NONCE_SIZE, TAG_SIZE, CipherContext, new_context
from .errors import CipherError, ConfigurationError
from .middleware import log_request, secure_headers
from .routes import cipher, health

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ErrorResponse(BaseModel):
    Error: bool = True
    Message: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Only reached when the app is built without a context, e.g. `uvicorn --factory`.
    if app.state.cipher is None:
        app.state.cipher = new_context(Settings.from_env().key_size)
    yield


async def cipher_error_handler(request: Request, exc: CipherError):
    """Translate a CipherError into the JSON error body."""
    status_code = exc.kind.status_code
    logger.error("%s on %s: %s", exc.kind.value, request.url.path, exc.message)
    message = exc.message if status_code < 500 else "The request could not be processed."
    return JSONResponse(status_code=status_code, content=ErrorResponse(Message=message).model_dump())


def create_app(cipher_context: Optional[CipherContext] = None) -> FastAPI:
    """Build the application around a CipherContext shared by every request."""
    app = FastAPI(
        title="CipherAPI",
        description="AES-GCM encryption and decryption over HTTP",
        version=VERSION,
        lifespan=lifespan
    )
    app.state.cipher = cipher_context

    app.add_exception_handler(CipherError, cipher_error_handler)

    # Last registered runs first: requests are logged before headers are applied.
    app.middleware("http")(secure_headers)
    app.middleware("http")(log_request)

    @app.get("/")
    async def api_root(request: Request):
        """Endpoint list, active cipher and envelope layout."""
        context = request.app.state.cipher
        return {
            "service": "CipherAPI",
            "version": VERSION,
            "cipher": context.algorithm if context else None,
            "envelope": {
                "layout": "nonce | ciphertext | tag",
                "nonce_bytes": NONCE_SIZE,
                "tag_bytes": TAG_SIZE,
                "note": "Keys are generated per process; envelopes only open on the process that sealed them"
            },
            "endpoints": [
                {"method": "GET", "path": "/", "description": "This manifest"},
                {"method": "GET", "path": "/health", "description": "Service status and active cipher"},
                {"method": "POST", "path": "/encrypt", "form": "data | upload_file", "description": "Seal text (returns envelope bytes) or an uploaded file (returns JSON)"},
                {"method": "POST", "path": "/decrypt", "form": "data", "description": "Open an envelope and return the plaintext bytes"}
            ]
        }

    app.include_router(health.router)
    app.include_router(cipher.router)
    return app


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="cipherapi", description="AES-GCM encryption and decryption service")
    parser.add_argument("--addr", default=None, help=f"HTTP network address (default {DEFAULT_ADDR})")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    load_env_file()

    try:
        settings = Settings.from_env(args.addr)
        logging.getLogger().setLevel(settings.log_level)
        cipher_context = new_context(settings.key_size)
    except ConfigurationError as e:
        logger.critical("Could not start: %s", e.message)
        return 1

    app = create_app(cipher_context)

    logger.info("Starting server on %s", settings.addr)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
