"""
REST endpoints controlling the background analyzer.

Expression values never leave the process; these routes only expose run
status and display settings.
"""
from fastapi import APIRouter, HTTPException
import logging

from emoji_overlay.config import Settings
from emoji_overlay.live import LiveAnalyzer
from emoji_overlay.models import DisplaySettings, LiveStatus, SettingsPatch

router = APIRouter()
settings = Settings()
analyzer = LiveAnalyzer(settings)
logger = logging.getLogger(__name__)


def _current_settings() -> DisplaySettings:
    s = analyzer.session.s
    return DisplaySettings(
        mobile=s.MOBILE,
        window_ms=s.window_ms,
        silence_timeout_ms=s.SILENCE_TIMEOUT_MS,
        confidence_threshold=s.CONFIDENCE_THRESHOLD,
        change_threshold=s.CHANGE_THRESHOLD,
        show_all_expressions=s.SHOW_ALL_EXPRESSIONS,
    )


@router.post("/live/start")
async def live_start():
    """
    Start the camera + detection loop on a background thread.

    Returns:
        dict: {"status": "started" | "already_running"}
    """
    if not analyzer.start():
        return {"status": "already_running"}
    logger.debug("[api] live analyzer started")
    return {"status": "started"}


@router.get("/live/status", response_model=LiveStatus)
async def live_status():
    return analyzer.status()


@router.post("/live/stop")
async def live_stop():
    if not analyzer.stop():
        return {"status": "not_running"}
    logger.debug("[api] live analyzer stopped")
    return {"status": "stopped"}


@router.get("/settings", response_model=DisplaySettings)
async def get_settings():
    return _current_settings()


@router.patch("/settings", response_model=DisplaySettings)
async def update_settings(patch: SettingsPatch):
    """
    Update display settings; they take effect from the next detection cycle.

    Args:
        patch: Only the provided fields are changed.

    Returns:
        DisplaySettings: The settings now in effect.
    """
    changes = patch.model_dump(exclude_none=True)
    logger.debug(f"[api] /settings patch={changes}")
    try:
        analyzer.session.apply(**changes)
    except ValueError as e:
        logger.exception("[api] settings update rejected")
        raise HTTPException(status_code=422, detail=str(e))
    return _current_settings()
