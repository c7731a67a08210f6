from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
import time
import structlog

from studyai.db import init_db
from studyai.routers import auth as auth_router
from studyai.routers import notes as notes_router
from studyai.routers import summaries as summaries_router
from studyai.routers import flashcards as flashcards_router
from studyai.routers import quizzes as quizzes_router
from studyai.routers import chat as chat_router
from studyai.services.logging import configure_logging, log_api_request
from studyai.services.monitoring import health_checker, get_metrics, REQUEST_COUNT, REQUEST_DURATION
from studyai.middleware.rate_limit import limiter, rate_limit_exceeded_handler

# Configure logging
configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("application_started")
    yield


app = FastAPI(
    title="StudyAI",
    description="Study notes to summaries, flashcards, quizzes and chat",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    log_api_request(request)

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Route template keeps the metric label set bounded
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code
    ).inc()
    REQUEST_DURATION.labels(
        method=request.method,
        endpoint=endpoint
    ).observe(process_time)

    response.response_time = process_time
    log_api_request(request, response)

    return response


# ----------------- Health & Monitoring Endpoints -----------------
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return health_checker.get_health_status()


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return get_metrics()


# ----------------- Routers -----------------
app.include_router(auth_router.router)
app.include_router(notes_router.router)
app.include_router(summaries_router.router)
app.include_router(flashcards_router.router)
app.include_router(quizzes_router.router)
app.include_router(chat_router.router)
