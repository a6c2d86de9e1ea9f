from fastapi import APIRouter, Depends, HTTPException

from subject_router.api.dependencies import get_services
from subject_router.core.exceptions import ConfigurationError, NotFoundError
from subject_router.schemas.chat import ConverseRequest, ConverseResponse
from subject_router.services.container import Services

router = APIRouter()


@router.post("/converse", response_model=ConverseResponse)
async def converse(req: ConverseRequest, services: Services = Depends(get_services)):
    """
    One conversation turn.

    - History is kept per requestor for 12h after the last turn
    - The reply is always a string; backend failures come back as text
    """
    requestor = req.requestor or "user"
    reply = await services.router.converse(req.query, requestor)
    return ConverseResponse(status="success", requestor=requestor, reply=reply)


@router.get("/subjects")
async def get_subjects(services: Services = Depends(get_services)):
    """List the subjects queries can be routed to."""
    return {"status": "success", "subjects": services.router.get_subjects()}


@router.get("/prompts/{key}")
async def get_prompt(key: str, services: Services = Depends(get_services)):
    try:
        return {"status": "success", "key": key, "prompt": services.router.get_prompt(key)}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/responses/{key}")
async def get_response(key: str, services: Services = Depends(get_services)):
    try:
        return {"status": "success", "key": key, "response": services.router.get_response(key)}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
