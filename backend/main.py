import logging
import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.routes import api_router
from api.routes.waitroom import init_waitroom_runtime, shutdown_waitroom_runtime

# -------------------------------
# Logging
# -------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# quiet noisy sub-loggers
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("redis").setLevel(logging.WARNING)


# -------------------------------
# FastAPI lifespan
# -------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    # === STARTUP ===
    await init_waitroom_runtime()

    yield

    # === SHUTDOWN ===
    await shutdown_waitroom_runtime()


# -------------------------------
# FastAPI app
# -------------------------------

app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)


# health check
@app.get("/healthz", tags=["infra"])
async def health_check():
    return {"status": "ok"}


# gate routes (catch-all, registered last)
app.include_router(api_router)
