from __future__ import annotations

import logging
import re
import secrets
from typing import Dict, Optional

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from scoreboard.config import Settings
from scoreboard.errors import AuthError, RateLimitError, ScoreboardError, StoreError, ValidationError
from scoreboard.guards import RateLimiter, client_key, validate_submission
from scoreboard.store import ScoreStore


LEADERBOARD_LIMIT = 100
SUBMIT_PATH = "/api/scores"
SCORE_ID_PATTERN = re.compile(r"[0-9]+")
LOGGER = logging.getLogger("leaderboard")


class HealthResponse(BaseModel):
    status: str


class OkResponse(BaseModel):
    ok: bool


class ScoreItem(BaseModel):
    id: int
    name: str
    time: int
    date: str


def create_app(
    settings: Optional[Settings] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.log_level)

    store = ScoreStore(settings.db_path, settings.table_name)
    store.initialize()
    LOGGER.info("score store ready db=%s table=%s", settings.db_path, settings.table_name)

    app = FastAPI(title="Leaderboard API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.store = store
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
    app.state.metrics = {
        "submit_total": 0,
        "submit_accepted_total": 0,
        "submit_rejected_rate_limited_total": 0,
        "submit_rejected_invalid_payload_total": 0,
        "store_errors_total": 0,
    }

    def error_response(status_code: int, message: str) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"error": message})

    @app.middleware("http")
    async def limit_request_body(request: Request, call_next):
        if request.method == "POST" and request.url.path == SUBMIT_PATH:
            content_length = request.headers.get("content-length")
            if content_length:
                try:
                    length = int(content_length)
                except ValueError:
                    length = None
                if length is not None and length > settings.max_body_bytes:
                    app.state.metrics["submit_rejected_invalid_payload_total"] += 1
                    LOGGER.info("submission rejected: payload too large (%s bytes)", length)
                    return error_response(400, "payload too large")
            body = await request.body()
            if len(body) > settings.max_body_bytes:
                app.state.metrics["submit_rejected_invalid_payload_total"] += 1
                LOGGER.info("submission rejected: payload too large (%s bytes)", len(body))
                return error_response(400, "payload too large")
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    def request_validation_handler(_request: Request, exc: RequestValidationError):
        LOGGER.info("invalid request: %s", exc.errors())
        return error_response(400, "invalid payload")

    @app.exception_handler(ScoreboardError)
    def scoreboard_error_handler(_request: Request, exc: ScoreboardError):
        if isinstance(exc, StoreError):
            app.state.metrics["store_errors_total"] += 1
            LOGGER.error("store failure: %s", exc.message)
            return error_response(exc.status_code, "internal error")
        return error_response(exc.status_code, exc.message)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok")

    @app.get(SUBMIT_PATH, response_model=list[ScoreItem])
    def top_scores(limit: int = LEADERBOARD_LIMIT):
        limit = max(1, min(limit, LEADERBOARD_LIMIT))
        records = store.top_scores(limit)
        return [
            ScoreItem(id=record.id, name=record.name, time=record.time, date=record.date)
            for record in records
        ]

    @app.post(SUBMIT_PATH, response_model=OkResponse, status_code=201)
    async def submit(request: Request):
        ip = client_key(request)
        metrics: Dict[str, int] = app.state.metrics
        metrics["submit_total"] += 1
        limiter: RateLimiter = app.state.rate_limiter
        if not limiter.check(ip):
            LOGGER.warning("rate limited submission ip=%s", ip)
            metrics["submit_rejected_rate_limited_total"] += 1
            raise RateLimitError("too many requests")

        try:
            body = await request.json()
            if not isinstance(body, dict):
                raise ValidationError("invalid payload")
            score = validate_submission(body)
        except ValueError:
            LOGGER.info("submission rejected: ip=%s reason=undecodable body", ip)
            metrics["submit_rejected_invalid_payload_total"] += 1
            raise ValidationError("invalid payload") from None
        except ValidationError as exc:
            LOGGER.info("submission rejected: ip=%s reason=%s", ip, exc.message)
            metrics["submit_rejected_invalid_payload_total"] += 1
            raise

        score_id = await run_in_threadpool(store.insert, score.name, score.time)
        LOGGER.info("accepted id=%s ip=%s name=%r time=%s", score_id, ip, score.name, score.time)
        metrics["submit_accepted_total"] += 1
        return OkResponse(ok=True)

    @app.delete(SUBMIT_PATH + "/{score_id}", response_model=OkResponse)
    def delete_score(score_id: str, x_admin_key: Optional[str] = Header(default=None)):
        expected = settings.admin_key
        if not expected or not x_admin_key or not secrets.compare_digest(
            x_admin_key.encode("utf-8"), expected.encode("utf-8")
        ):
            LOGGER.warning("forbidden delete attempt id=%s", score_id)
            raise AuthError("forbidden")
        if not SCORE_ID_PATTERN.fullmatch(score_id):
            raise ValidationError("invalid id")
        parsed_id = int(score_id)

        removed = store.delete_by_id(parsed_id)
        LOGGER.info("delete id=%s removed=%s", parsed_id, removed)
        return OkResponse(ok=True)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.settings.host, port=app.state.settings.port)
