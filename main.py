from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# quiet per-request HTTP library logs
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


# ✅ middlewares
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ auth
from dependencies.security import require_console_token

# ✅ local store (report-card drafts)
from database.db import Base, engine
import models.grade_drafts  # noqa: F401  registers the table on Base

# ✅ routers
from routers import (
    academic, attendance, behavior, calendars, events,
    grades, institutions, meta, users,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS (console frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ latency header X-Latency-Ms
app.add_middleware(TimingMiddleware)

# ✅ one JSON error shape for every failure
add_error_handlers(app)

# ✅ /v1 routers, all behind the console token
guarded = [Depends(require_console_token)]
app.include_router(academic.router,              prefix="/v1", dependencies=guarded)
app.include_router(attendance.router,            prefix="/v1", dependencies=guarded)
app.include_router(behavior.router,              prefix="/v1", dependencies=guarded)
app.include_router(events.router,                prefix="/v1", dependencies=guarded)
app.include_router(calendars.router,             prefix="/v1", dependencies=guarded)
app.include_router(grades.router,                prefix="/v1", dependencies=guarded)
app.include_router(institutions.router,          prefix="/v1", dependencies=guarded)
app.include_router(institutions.classroom_router, prefix="/v1", dependencies=guarded)
app.include_router(users.router,                 prefix="/v1", dependencies=guarded)
app.include_router(meta.router,                  prefix="/v1")


@app.on_event("startup")
def _create_tables():
    Base.metadata.create_all(bind=engine)


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


# ✅ root
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - school administration console backend"}
