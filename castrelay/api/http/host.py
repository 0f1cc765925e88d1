"""Read-only view of the current Host."""

from fastapi import APIRouter

from castrelay.connection_registry import connection_registry
from castrelay.logging import logger
from castrelay.schemas.response import CurrentHostModel

router = APIRouter()


@router.get(
    "/current-host",
    response_model=CurrentHostModel,
    summary="Profile of the registered Host",
    tags=["signaling"],
)
async def current_host() -> CurrentHostModel:
    """
    Return the Host currently held by the registry.

    Returns:
        CurrentHostModel: `{"profile": Profile}` or `{"profile": null}`
        when no Host is registered.
    """
    host = connection_registry.find_host()
    logger.debug(
        f"Current host: {host.profile.id if host else None} "
        f"({len(connection_registry)} connections)"
    )
    return CurrentHostModel(profile=host.profile if host else None)
