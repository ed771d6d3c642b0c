import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before app modules read them
load_dotenv()

from app.database import close_db, init_db, is_database_enabled  # noqa: E402
from app.middleware.rate_limit import RateLimitMiddleware  # noqa: E402
from app.routers import items, roommates  # noqa: E402
from app.schemas import HealthResponse  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if is_database_enabled():
        await init_db()
    else:
        logger.info("USE_DATABASE is off, serving the bundled JSON dataset")
    yield
    await close_db()


app = FastAPI(
    title="Campus Cart API",
    description="Search and location-aware ranking for campus marketplace items and roommate posts",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[frontend_url, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware)

app.include_router(items.router)
app.include_router(roommates.router)


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint - basic health check"""
    return HealthResponse(
        status="healthy",
        message="Campus Cart API is running. Visit /docs for API documentation."
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="healthy",
        message="Campus Cart API is healthy and ready to serve requests"
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
