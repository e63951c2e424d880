from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from settings import LOG_LEVEL, CORS_ORIGINS
from readiness.routes import router as readiness_router

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logging.info("Graduation readiness service starting")

app = FastAPI(title="Graduation Readiness API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(readiness_router)


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "ok"}
