"""
Session endpoints for the per-requestor conversation histories.
"""
from fastapi import APIRouter, Depends, HTTPException

from subject_router.api.dependencies import get_services
from subject_router.services.container import Services

router = APIRouter()


@router.get("/session/{requestor}/history")
async def get_session_history(requestor: str, services: Services = Depends(get_services)):
    """Get the live conversation history for a requestor."""
    history = services.session_store.get(requestor)
    if history is None:
        raise HTTPException(status_code=404, detail=f"No active session for '{requestor}'.")
    return {
        "status": "success",
        "session_info": services.session_store.get_session_info(requestor),
        "message_count": len(history),
        "history": history.messages
    }


@router.delete("/session/{requestor}")
async def clear_session(requestor: str, services: Services = Depends(get_services)):
    """Drop a requestor's conversation history."""
    services.session_store.clear(requestor)
    return {
        "status": "success",
        "requestor": requestor,
        "message": "Session history cleared"
    }


@router.get("/sessions")
async def list_sessions(services: Services = Depends(get_services)):
    """List all live sessions."""
    sessions = services.session_store.get_all_sessions()
    return {
        "status": "success",
        "session_count": len(sessions),
        "sessions": sessions
    }


@router.post("/cleanup/expired")
async def cleanup_expired_sessions(services: Services = Depends(get_services)):
    """Evict expired histories and field metadata."""
    sessions = services.session_store.purge_expired()
    fields = services.field_cache.purge_expired()
    return {
        "status": "success",
        "removed_sessions": sessions,
        "removed_field_metadata": fields
    }
