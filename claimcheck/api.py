"""FastAPI application exposing the claim verification endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .sessions import ClaimSession, StoredUpload
from .utils.config import Config
from .utils.dates import format_display_date
from .utils.errors import ClaimsProcessingError, MissingUpload, UploadTooLarge
from .utils.logging import reset_context, set_context
from .verifier import ClaimVerifier

logger = logging.getLogger(__name__)

APP_TITLE = "ClaimCheck - Claim Document and Photo Verification"
SESSION_COOKIE = "claim_session"
SESSION_HEADER = "X-Claim-Session"


def _resolve_session_id(request: Request) -> Optional[str]:
    return request.headers.get(SESSION_HEADER) or request.cookies.get(SESSION_COOKIE)


def _read_upload(file: Optional[UploadFile], field_name: str, max_bytes: int) -> Optional[StoredUpload]:
    if file is None:
        return None
    # One byte past the limit is enough to reject the upload
    data = file.file.read(max_bytes + 1)
    size = len(data)
    filename = file.filename or field_name
    if size == 0:
        raise MissingUpload.build(f"{filename} is empty.", field=field_name)
    if size > max_bytes:
        raise UploadTooLarge.build(
            f"{filename} exceeds the per-file limit of {max_bytes // (1024 * 1024)} MB.",
            field=field_name,
            size=size
        )
    logger.debug(f"Read upload {filename} ({file.content_type}, {size} bytes)")
    return StoredUpload(
        filename=filename,
        content_type=file.content_type or "application/octet-stream",
        data=data,
        size=size,
    )


def _with_session(payload: Dict[str, Any], session: ClaimSession) -> JSONResponse:
    response = JSONResponse(jsonable_encoder(payload))
    response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return response


def create_app(config: Optional[Config] = None, verifier: Optional[ClaimVerifier] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Configuration is loaded here when not supplied, so missing model
    service settings fail at startup rather than on the first request.

    Args:
        config: Loaded configuration (Config.load() when omitted)
        verifier: Pre-built verifier (built from config when omitted)

    Returns:
        Configured FastAPI application
    """
    config = config or Config.load()
    verifier = verifier or ClaimVerifier.from_config(config)
    max_bytes = config.uploads.max_file_size_bytes

    app = FastAPI(title=APP_TITLE)
    app.state.config = config
    app.state.verifier = verifier

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def session_log_context(request: Request, call_next):
        # Handlers and the error handler below run inside call_next and inherit this
        token = set_context(session_id=_resolve_session_id(request) or "-")
        try:
            return await call_next(request)
        finally:
            reset_context(token)

    @app.exception_handler(ClaimsProcessingError)
    async def claims_error_handler(request: Request, exc: ClaimsProcessingError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.user_message, "errorType": exc.context.error_type.value},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unexpected error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error.", "errorType": "UNKNOWN_ERROR"},
        )

    @app.post("/extract-pdf")
    def extract_pdf(request: Request, pdf: Optional[UploadFile] = File(None)) -> JSONResponse:
        session_id = _resolve_session_id(request)
        upload = _read_upload(pdf, "pdf", max_bytes)
        session, record = verifier.submit_claim_document(session_id, upload)
        set_context(session_id=session.session_id)

        payload = {
            "claimInfo": record.to_claim_info(),
            "claimDate": format_display_date(record.claim_date) if record.claim_date else None,
            "sessionId": session.session_id,
        }
        return _with_session(payload, session)

    @app.post("/verify-metadata")
    @app.post("/metadata")
    def verify_metadata(
        request: Request,
        image: Optional[UploadFile] = File(None),
        images: Optional[List[UploadFile]] = File(None),
    ) -> JSONResponse:
        session_id = _resolve_session_id(request)
        files = ([image] if image is not None else []) + list(images or [])
        uploads = [_read_upload(files[0], "images", max_bytes)] if files else []

        result = verifier.submit_verification_photos(session_id, uploads)
        return _with_session(result.to_dict(), result.session)

    @app.post("/analyze-image")
    def analyze_uploaded_image(request: Request, image: Optional[UploadFile] = File(None)) -> JSONResponse:
        session_id = _resolve_session_id(request)
        upload = _read_upload(image, "image", max_bytes)
        if upload is None:
            raise MissingUpload.build("No file uploaded.", field="image")

        result = verifier.request_image_match(session_id, upload)
        return JSONResponse(jsonable_encoder(result.to_dict()))

    @app.get("/analyze-image")
    def analyze_cached_image(request: Request) -> JSONResponse:
        session_id = _resolve_session_id(request)
        result = verifier.request_image_match(session_id)
        return JSONResponse(jsonable_encoder(result.to_dict()))

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    return app
