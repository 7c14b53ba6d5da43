"""
Control API for the background expression analyzer.

Serve with `uvicorn api.main:app`. Routes live in `api.routes`: start/stop the
camera loop, read its run status, and read or patch the display settings.
Expression values are never served.
"""
import logging
from fastapi import FastAPI
from api.routes import router

logging.basicConfig(level=logging.DEBUG)
app = FastAPI(title="Emoji Expression Overlay API", version="1.0.0")
app.include_router(router)

@app.get("/health")
def health() -> dict:
    """Liveness check; does not touch the camera or the detector."""
    return {"status": "ok"}
