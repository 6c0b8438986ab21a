import logging
from typing import Optional

from fastapi import FastAPI

from calendar_agent.config import settings
from calendar_agent.constants import APP_SETTINGS
from calendar_agent.db.persistence import ConversationStore
from calendar_agent.orchestrator.workflow import CalendarWorkflow, build_workflow
from calendar_agent.routes import chat, health

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s"
)

logger = logging.getLogger(__name__)


def create_app(workflow: Optional[CalendarWorkflow] = None) -> FastAPI:
    """
    Create the HTTP application.

    Args:
        workflow: Pre-built workflow; when omitted one is built from settings on startup
    """
    app = FastAPI(
        title=APP_SETTINGS.APP_NAME,
        version=APP_SETTINGS.VERSION,
        description=APP_SETTINGS.DESCRIPTION
    )
    app.state.workflow = workflow
    app.state.conversation_store = ConversationStore()

    @app.on_event("startup")
    async def startup_event():
        """Validate configuration and build the workflow on startup"""
        if app.state.workflow is not None:
            return
        from calendar_agent.config import validate_required_keys
        try:
            validate_required_keys()
            app.state.workflow = build_workflow()
            print("✅ Calendar agent initialized successfully")
        except Exception as e:
            print(f"❌ Failed to initialize calendar agent: {e}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup resources on shutdown"""
        print("🔄 Shutting down gracefully...")

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {APP_SETTINGS.APP_NAME}"}

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(chat.router, prefix="/chat", tags=["Chat"])

    return app


def main():
    import uvicorn

    uvicorn.run(
        "calendar_agent.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.APP_PORT,
        reload=settings.APP_ENV == "development"
    )


if __name__ == "__main__":
    main()
