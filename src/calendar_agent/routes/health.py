from fastapi import APIRouter, Request

from calendar_agent.routes.dto import HealthResponse

router = APIRouter()


@router.get("/")
def health_check():
    return {"status": "ok"}


@router.get("/database", response_model=HealthResponse)
def database_health_check(request: Request):
    """
    Health check for the calendar database.
    """
    workflow = getattr(request.app.state, "workflow", None)
    if workflow is None:
        return HealthResponse(status="error", service="database", components={"workflow": "not initialized"})
    try:
        workflow.detector.repository.list_event_types()
        return HealthResponse(status="ok", service="database", components={"database": "ready"})
    except Exception as e:
        return HealthResponse(status="error", service="database", components={"database": f"error: {str(e)}"})
