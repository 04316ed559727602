import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from urlsigner.config import Settings, get_settings
from urlsigner.durations import Clock, format_expiry
from urlsigner.errors import InvalidDurationError, InvalidURLError
from urlsigner.models import SignURLRequest, SignURLResponse, VerifyURLRequest, VerifyURLResponse
from urlsigner.signing import URLSigner

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, clock: Clock | None = None) -> FastAPI:
    settings = settings or get_settings()
    signer = URLSigner.from_settings(settings, clock=clock)

    app = FastAPI(title=settings.app_name)
    app.state.signer = signer

    @app.get("/")
    def root() -> dict:
        return {"status": "ok", "service": "url-signer"}

    def error_response(status_code: int, message: str, code: str) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={"error": {"code": code, "message": message}},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(_: Request, exc: RequestValidationError):
        missing_fields = [
            ".".join(str(item) for item in error["loc"] if item != "body")
            for error in exc.errors()
            if error.get("type") == "missing"
        ]
        if missing_fields:
            message = f"missing parameters: {', '.join(missing_fields)}"
        else:
            message = "invalid request parameters"
        return error_response(400, message, "bad_request")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException):
        message = str(exc.detail) if exc.detail else "request failed"
        code_map = {
            400: "bad_request",
            403: "forbidden",
            404: "not_found",
        }
        return error_response(exc.status_code, message, code_map.get(exc.status_code, "error"))

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "environment": settings.app_env}

    @app.post("/v1/urls/sign", response_model=SignURLResponse)
    def sign_url(payload: SignURLRequest):
        try:
            signed_url, expires = signer.sign_with_expiry(payload.url, payload.validity)
        except (InvalidURLError, InvalidDurationError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return SignURLResponse(
            signed_url=signed_url,
            expires=expires,
            expires_at=format_expiry(expires, settings.display_utc_offset_hours),
        )

    @app.post("/v1/urls/verify", response_model=VerifyURLResponse)
    def verify_url(payload: VerifyURLRequest):
        return VerifyURLResponse(valid=signer.verify(payload.url))

    @app.get("/v1/protected")
    def protected(request: Request):
        if not signer.verify(str(request.url)):
            logger.info("refused signed request to %s", request.url.path)
            raise HTTPException(status_code=403, detail="invalid signature")
        return {"status": "ok", "path": request.url.path}

    return app


app = create_app()
