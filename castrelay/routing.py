import os
import pkgutil
from importlib import import_module

from fastapi import APIRouter
from pydantic import BaseModel, ValidationError

from castrelay.api.ws.constants import SignalEvent
from castrelay.logging import logger
from castrelay.protocols import Transport
from castrelay.schemas.generic_typing import HandlerCallableType
from castrelay.schemas.request import SignalMessage
from castrelay.utils.metrics import ws_invalid_messages_total


class EventRouter:
    """
    Router for inbound WebSocket events.

    Maps each `SignalEvent` to one handler coroutine and the pydantic model
    its payload must validate against.
    """

    def __init__(self):
        """
        Initializes the `EventRouter` with empty registries.

        `handlers_registry` maps events to handler functions and
        `payloads_registry` maps events to the payload model validated
        before the handler is called.
        """
        self.handlers_registry: dict[SignalEvent, HandlerCallableType] = {}
        self.payloads_registry: dict[SignalEvent, type[BaseModel]] = {}

    def register(self, *events: SignalEvent, payload: type[BaseModel]):
        """
        Decorator to register a handler for one or more events.

        The handler is called as `await handler(transport, parsed_payload)`.

        Args:
            *events (SignalEvent): Events handled by the decorated function.
            payload (type[BaseModel]): Model used to validate `data`.

        Returns:
            A decorator that registers the handler and returns it unchanged.

        Raises:
            ValueError: If a different handler is already registered for
                one of the events.
        """

        def decorator(func: HandlerCallableType):
            for event in events:
                # Idempotent for module reloads
                if event in self.handlers_registry:
                    if self.handlers_registry[event] != func:
                        raise ValueError(
                            f"Different handler already registered for event {event}"
                        )
                    continue

                self.handlers_registry[event] = func
                self.payloads_registry[event] = payload

                logger.info(
                    f"Register {func.__module__}.{func.__name__} for event: {event}"
                )

            return func

        return decorator

    def has_handler(self, event: SignalEvent) -> bool:
        return event in self.handlers_registry

    async def handle_message(
        self, transport: Transport, message: SignalMessage
    ) -> bool:
        """
        Validate the message payload and run its handler.

        Unknown events and invalid payloads are logged and dropped; they
        never close the connection.

        Returns:
            True if a handler ran, False if the message was dropped.
        """
        if not self.has_handler(message.event):
            logger.warning(f"No handler found for event {message.event}")
            ws_invalid_messages_total.inc()
            return False

        try:
            payload = self.payloads_registry[message.event].model_validate(
                message.data
            )
        except ValidationError as ex:
            logger.warning(
                f"Invalid payload for event {message.event}: "
                f"{ex.error_count()} error(s): {ex.errors(include_url=False)}"
            )
            ws_invalid_messages_total.inc()
            return False

        await self.handlers_registry[message.event](transport, payload)
        return True


event_router = EventRouter()


# Track registered modules to prevent duplicate logging
_registered_http_modules: set[str] = set()
_registered_ws_modules: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Collects all HTTP and WebSocket routers of the application.

    Iterates through the `api/http` and `api/ws/consumers` directories,
    imports each module and includes its `router` in one main `APIRouter`.
    """
    main_router: APIRouter = APIRouter()

    app_dir = os.path.dirname(__file__)
    app_name = os.path.basename(app_dir)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/http"]):
        api = import_module(f".{module}", package=f"{app_name}.api.http")
        main_router.include_router(api.router)

        if module not in _registered_http_modules:
            logger.info(f'Register "{module}" api')
            _registered_http_modules.add(module)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/ws/consumers"]):
        ws_consumer = import_module(
            f".{module}", package=f"{app_name}.api.ws.consumers"
        )
        main_router.include_router(ws_consumer.router)

        if module not in _registered_ws_modules:
            logger.info(f'Register "{module}" websocket consumer')
            _registered_ws_modules.add(module)

    return main_router
