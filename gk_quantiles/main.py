import logging

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from gk_quantiles import __version__
from gk_quantiles.endpoints.summaries import router as summaries_router
from gk_quantiles.service.config import get_service_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="GK Quantiles Service API",
    version=__version__,
    description="Streaming approximate quantiles over mergeable Greenwald–Khanna summaries",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(summaries_router, tags=["Quantile Summaries"])


@app.get("/")
async def root():
    return {"message": "Welcome to the GK Quantiles Service"}


@app.get("/q/metrics")
async def metrics(request: Request):
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# Readiness probe
@app.get("/q/health/ready")
async def readiness_probe():
    return JSONResponse(content={"status": "ready"}, status_code=200)


# Liveness probe endpoint
@app.get("/q/health/live")
async def liveness_probe():
    return JSONResponse(content={"status": "live"}, status_code=200)


def run() -> None:
    """Start the HTTP server on the configured port."""
    http_port = get_service_config()["http_port"]
    logger.info(f"Starting GK Quantiles server on port {http_port}")
    uvicorn.run(app=app, host="0.0.0.0", port=http_port)


if __name__ == "__main__":
    run()
