"""
Tests for event routing.

This module tests handler registration, payload validation and dispatch
of decoded WebSocket messages.
"""

from unittest.mock import AsyncMock

import pytest

from castrelay.api.ws.constants import SignalEvent
from castrelay.routing import EventRouter, event_router
from castrelay.schemas.profile import ProfileModel
from castrelay.schemas.request import SessionOfferModel, SignalMessage


class TestRegister:
    def test_register_returns_handler(self):
        """Test that the decorator registers and returns the function."""
        router = EventRouter()

        @router.register(SignalEvent.SESSION_OFFER, payload=SessionOfferModel)
        async def handler(transport, payload):
            pass

        assert router.has_handler(SignalEvent.SESSION_OFFER)
        assert router.handlers_registry[SignalEvent.SESSION_OFFER] is handler
        assert (
            router.payloads_registry[SignalEvent.SESSION_OFFER]
            is SessionOfferModel
        )

    def test_register_same_handler_twice(self):
        """Test that registering the same handler again is a no-op."""
        router = EventRouter()

        async def handler(transport, payload):
            pass

        router.register(SignalEvent.REGISTER_HOST, payload=ProfileModel)(
            handler
        )
        router.register(SignalEvent.REGISTER_HOST, payload=ProfileModel)(
            handler
        )

        assert router.handlers_registry == {SignalEvent.REGISTER_HOST: handler}

    def test_register_different_handler_raises(self):
        """Test that a second handler for the same event is rejected."""
        router = EventRouter()

        @router.register(SignalEvent.REGISTER_HOST, payload=ProfileModel)
        async def first(transport, payload):
            pass

        async def second(transport, payload):
            pass

        with pytest.raises(ValueError, match="already registered"):
            router.register(SignalEvent.REGISTER_HOST, payload=ProfileModel)(
                second
            )

    def test_all_inbound_events_have_handlers(self):
        """Test that the application router serves every client event."""
        import castrelay.api.ws.handlers  # noqa: F401

        inbound = {
            SignalEvent.REGISTER_HOST,
            SignalEvent.REGISTER_VIEWER,
            SignalEvent.REQUEST_CONNECTION,
            SignalEvent.SESSION_OFFER,
            SignalEvent.SESSION_ANSWER,
            SignalEvent.ICE_CANDIDATE,
        }

        assert inbound <= set(event_router.handlers_registry)


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_dispatches_validated_payload(self, make_transport):
        """Test that the handler receives the transport and the parsed model."""
        router = EventRouter()
        handler = AsyncMock()
        router.register(SignalEvent.REGISTER_VIEWER, payload=ProfileModel)(
            handler
        )
        transport = make_transport()
        message = SignalMessage(
            event=SignalEvent.REGISTER_VIEWER,
            data={"id": "v1", "name": "Viewer", "role": "Viewer"},
        )

        handled = await router.handle_message(transport, message)

        assert handled
        handler.assert_awaited_once()
        called_transport, payload = handler.await_args.args
        assert called_transport is transport
        assert isinstance(payload, ProfileModel)
        assert payload.id == "v1"

    @pytest.mark.asyncio
    async def test_event_without_handler_is_dropped(self, make_transport):
        """Test that an event nobody handles is ignored."""
        router = EventRouter()
        transport = make_transport()

        handled = await router.handle_message(
            transport, SignalMessage(event=SignalEvent.REGISTERED)
        )

        assert not handled
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_invalid_payload_is_dropped(self, make_transport):
        """Test that a payload failing validation never reaches the handler."""
        router = EventRouter()
        handler = AsyncMock()
        router.register(SignalEvent.SESSION_OFFER, payload=SessionOfferModel)(
            handler
        )

        handled = await router.handle_message(
            make_transport(),
            SignalMessage(
                event=SignalEvent.SESSION_OFFER, data={"sdp": "missing"}
            ),
        )

        assert not handled
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_errors_propagate(self, make_transport):
        """Test that a failing handler is not silenced by the router."""
        router = EventRouter()
        router.register(SignalEvent.REGISTER_VIEWER, payload=ProfileModel)(
            AsyncMock(side_effect=RuntimeError("boom"))
        )

        with pytest.raises(RuntimeError, match="boom"):
            await router.handle_message(
                make_transport(),
                SignalMessage(
                    event=SignalEvent.REGISTER_VIEWER,
                    data={"id": "v1", "name": "n", "role": "Viewer"},
                ),
            )
