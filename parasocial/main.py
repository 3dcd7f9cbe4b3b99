import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from parasocial.config import get_settings
from parasocial.database import init_db
from parasocial.rate_limit import limiter
from parasocial.social_graph.router import router as social_router
from shared.middleware.error_handler import error_envelope_middleware, validation_error_handler
from shared.middleware.request_id import RequestIdLogFilter, request_id_middleware

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:[%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## ParaSocial Relationship Service

Owns the follow / block graph between accounts:

* **Follows**: directed edges from a local account, or from a federated
  ActivityPub actor, to a local account. No self-follows, no duplicates.
* **Blocks**: directed edges between local accounts. Creating a block removes
  follow edges between the pair in both directions.
* **Queries**: paginated followers / following (newest first), counts,
  single and bulk follow checks, recent followers, relationship flags.

### Authentication
Endpoints acting on behalf of the caller require:
```
Authorization: Bearer <access_token>
```
`POST /users/{username}/follow` also accepts an unauthenticated body with
`actor_id` for federated follows.

### Error shape
```json
{ "success": false, "error": { "code": "ALREADY_FOLLOWING", "message": "..." }, "request_id": "..." }
```
"""

_TAGS_METADATA = [
    {
        "name": "social-graph",
        "description": (
            "Follows (local and federated), blocks, follower/following lists, "
            "stats and follow checks. Blocking removes follow edges in both directions."
        ),
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(get_settings().database_url)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="ParaSocial Relationship Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Attach rate limiter state before middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Middleware is applied in reverse-registration order (last added = outermost).
    # CORS must be outermost so ALL responses (including 429s) carry CORS headers.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(social_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="relationships")

    return app


app = create_app()
