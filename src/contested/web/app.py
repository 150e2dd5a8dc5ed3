"""
Contested Web - FastAPI application.

Serves the session endpoints the wizard depends on and mounts the
onboarding wizard router.
"""

import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from contested import __version__
from contested.web import session as session_service
from onboarding.api import router as onboarding_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Contested", version=__version__)
app.include_router(onboarding_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# =============================================================================
# Models
# =============================================================================


class SessionResetRequest(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)


# =============================================================================
# Session Endpoints
# =============================================================================


@app.post("/api/chat/session")
async def create_session():
    """Create a new onboarding session."""
    session_id = session_service.create_session_id()
    try:
        session_service.create_session(session_id)
    except Exception as e:
        logger.error(f"Error creating session: {e}")
        raise HTTPException(status_code=500, detail="Failed to create session")

    return {"sessionId": session_id, "message": "Session created successfully"}


@app.post("/api/chat/reset")
async def reset_session(request: SessionResetRequest):
    """Reset an existing session's data."""
    try:
        session_service.reset_session(request.session_id)
    except Exception as e:
        logger.error(f"Error resetting session {request.session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to reset session")

    return {"message": "Session reset successfully"}
