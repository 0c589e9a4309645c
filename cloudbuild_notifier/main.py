"""Cloud Build notifier - Slack notifications for Cloud Build events."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import FastAPI, HTTPException, status
from fastapi.responses import JSONResponse

from cloudbuild_notifier.config import get_settings
from cloudbuild_notifier.errors import ConfigurationError, DecodeError, DeliveryError
from cloudbuild_notifier.models.pubsub import PushEnvelope
from cloudbuild_notifier.router import NotificationRouter, create_router
from cloudbuild_notifier.sources.cloudbuild import CloudBuildSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

source = CloudBuildSource()

# Global router instance for the push endpoint
router: NotificationRouter | None = None


@lru_cache
def get_router() -> NotificationRouter:
    """Build the router once per process from environment settings."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    return create_router(settings)


def load_function_router() -> NotificationRouter | None:
    """Build the router at cold start when loaded by the Cloud Functions runtime."""
    if not os.environ.get("FUNCTION_TARGET"):
        return None
    return get_router()


async def handle_event(event: dict[str, Any], notification_router: NotificationRouter) -> list[str]:
    """Decode a Pub/Sub message and route the build it carries."""
    logger.info(
        f"Received message {event.get('message_id') or event.get('messageId') or '-'} "
        f"attributes={event.get('attributes') or {}}"
    )
    build = source.parse(event)
    logger.info(f"Decoded {source.name} build {build.id}: status={build.status}")
    return await notification_router.route_build(build)


def subscribe_slack(event: dict[str, Any], context: Any = None) -> None:
    """Background Cloud Function triggered by the ``cloud-builds`` topic."""
    event_id = getattr(context, "event_id", None)
    if event_id:
        logger.debug(f"Invocation event id: {event_id}")
    asyncio.run(handle_event(event, get_router()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    global router

    try:
        router = get_router()
    except ConfigurationError as e:
        logger.error(f"Cannot start: {e}")
        raise

    logger.info("Cloud Build notifier started")

    yield

    router = None
    logger.info("Cloud Build notifier stopped")


app = FastAPI(
    title="Cloud Build Notifier",
    description="Slack notifications for Cloud Build events delivered by Pub/Sub push",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/policy")
async def show_policy() -> dict[str, Any]:
    """Show the active notification policy."""
    if not router:
        return {"policy": None}

    policy = router.policy
    return {
        "policy": {
            "notify_statuses": sorted(policy.notify_statuses),
            "failure_statuses": sorted(policy.failure_statuses),
            "ignore_tags": sorted(policy.ignore_tags),
            "schedule_tag": policy.schedule_tag,
            "failure_channel_configured": policy.failure_channel_configured,
        }
    }


@app.post("/pubsub/cloudbuild")
async def cloudbuild_push(envelope: PushEnvelope) -> JSONResponse:
    """Receive a Pub/Sub push delivery from the ``cloud-builds`` topic."""
    if not router:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Router not configured",
        )

    try:
        delivered = await handle_event(envelope.event(), router)
    except DecodeError as e:
        logger.error(f"Failed to decode message {envelope.message.message_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid payload: {e}",
        )
    except DeliveryError as e:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"status": "error", "message": str(e), "channels": e.channels},
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "ok" if delivered else "filtered", "channels": delivered},
    )


def run() -> None:
    """Run the application using uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "cloudbuild_notifier.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )


# Fail the function deployment at cold start rather than on the first build
load_function_router()


if __name__ == "__main__":
    run()
