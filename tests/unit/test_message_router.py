"""
Tests for the message router.

This module tests targeted delivery of connection requests, offers,
answers and ICE candidates, and dropping of messages whose target left.
"""

import pytest
import pytest_asyncio

from castrelay.api.ws.constants import SignalEvent
from castrelay.connection_registry import Connection
from castrelay.schemas.profile import UserRole
from castrelay.schemas.request import (
    IceCandidateModel,
    SessionAnswerModel,
    SessionOfferModel,
)


@pytest_asyncio.fixture
async def host(registry, host_profile, make_transport):
    transport = make_transport()
    await registry.upsert(Connection(host_profile, transport))
    return transport


@pytest_asyncio.fixture
async def viewer(registry, viewer_profile, make_transport):
    transport = make_transport()
    await registry.upsert(Connection(viewer_profile, transport))
    return transport


class TestRequestConnection:
    @pytest.mark.asyncio
    async def test_no_host_replies_to_requester(
        self, router, viewer_profile, make_transport
    ):
        """Test that the requester alone is told there is no Host."""
        requester = make_transport()

        delivered = await router.request_connection(requester, viewer_profile)

        assert delivered
        assert requester.events == [SignalEvent.NO_HOST]
        assert requester.payloads(SignalEvent.NO_HOST)[0]["profile"] == {
            "id": "v1",
            "name": "Viewer One",
            "role": "Viewer",
        }

    @pytest.mark.asyncio
    async def test_host_is_notified(
        self, router, host, viewer, viewer_profile
    ):
        """Test that the Host receives the requesting Viewer's profile."""
        delivered = await router.request_connection(viewer, viewer_profile)

        assert delivered
        assert viewer.sent == []
        assert host.events == [SignalEvent.NOTIFY_NEW_CONNECTION]
        assert host.payloads(SignalEvent.NOTIFY_NEW_CONNECTION)[0]["id"] == "v1"


class TestRelayOffer:
    @pytest.mark.asyncio
    async def test_offer_reaches_viewer(
        self, router, host, viewer, viewer_profile
    ):
        """Test that the offer is forwarded unchanged to the named Viewer."""
        offer = SessionOfferModel(
            profile=viewer_profile, sdp={"type": "offer", "sdp": "v=0"}
        )

        delivered = await router.relay_offer(offer)

        assert delivered
        assert host.sent == []
        payload = viewer.payloads(SignalEvent.SESSION_OFFER)[0]
        assert payload["sdp"] == {"type": "offer", "sdp": "v=0"}
        assert payload["profile"]["id"] == "v1"

    @pytest.mark.asyncio
    async def test_offer_to_missing_viewer_is_dropped(
        self, router, registry, host, make_profile
    ):
        """Test that an offer to an unknown Viewer is dropped silently."""
        offer = SessionOfferModel(profile=make_profile("ghost"), sdp="v=0")

        delivered = await router.relay_offer(offer)

        assert not delivered
        assert host.sent == []
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_offer_does_not_reach_host_sharing_id(
        self, router, registry, make_profile, make_transport
    ):
        """Test that only Viewer entries are offer targets."""
        host = make_transport()
        await registry.upsert(
            Connection(make_profile("x", UserRole.HOST), host)
        )

        delivered = await router.relay_offer(
            SessionOfferModel(profile=make_profile("x"), sdp="v=0")
        )

        assert not delivered
        assert host.sent == []


class TestRelayAnswer:
    @pytest.mark.asyncio
    async def test_answer_reaches_host(
        self, router, host, viewer, viewer_profile
    ):
        """Test that the Host gets the answer with the answering Viewer."""
        answer = SessionAnswerModel(
            profile=viewer_profile, answer={"type": "answer", "sdp": "v=0"}
        )

        delivered = await router.relay_answer(answer)

        assert delivered
        assert viewer.sent == []
        payload = host.payloads(SignalEvent.SESSION_ANSWER)[0]
        assert payload["answer"] == {"type": "answer", "sdp": "v=0"}
        assert payload["profile"]["id"] == "v1"

    @pytest.mark.asyncio
    async def test_answer_without_host_is_dropped(
        self, router, viewer, viewer_profile
    ):
        delivered = await router.relay_answer(
            SessionAnswerModel(profile=viewer_profile, answer="a")
        )

        assert not delivered
        assert viewer.sent == []


class TestRelayIceCandidate:
    @pytest.mark.asyncio
    async def test_host_to_viewer(
        self, router, host, viewer, host_profile, viewer_profile
    ):
        """Test that a candidate naming a Viewer goes to that Viewer."""
        message = IceCandidateModel.model_validate(
            {
                "profile": host_profile.model_dump(),
                "candidate": {"candidate": "c1"},
                "viewerProfile": viewer_profile.model_dump(),
            }
        )

        delivered = await router.relay_ice_candidate(message)

        assert delivered
        assert host.sent == []
        payload = viewer.payloads(SignalEvent.ICE_CANDIDATE)[0]
        assert payload["candidate"] == {"candidate": "c1"}
        assert payload["profile"]["id"] == "v1"

    @pytest.mark.asyncio
    async def test_viewer_to_host(self, router, host, viewer, viewer_profile):
        """Test that a candidate without viewerProfile goes to the Host."""
        message = IceCandidateModel(
            profile=viewer_profile, candidate={"candidate": "c2"}
        )

        delivered = await router.relay_ice_candidate(message)

        assert delivered
        assert viewer.sent == []
        payload = host.payloads(SignalEvent.ICE_CANDIDATE)[0]
        assert payload["candidate"] == {"candidate": "c2"}
        assert payload["profile"]["id"] == "v1"

    @pytest.mark.asyncio
    async def test_dangling_viewer_target(
        self, router, registry, host, host_profile, make_profile
    ):
        """Test that a candidate for a departed Viewer produces no message."""
        message = IceCandidateModel(
            profile=host_profile,
            candidate="c3",
            viewer_profile=make_profile("gone"),
        )

        delivered = await router.relay_ice_candidate(message)

        assert not delivered
        assert host.sent == []
        assert len(registry) == 1

    @pytest.mark.asyncio
    async def test_dangling_host_target(self, router, viewer, viewer_profile):
        """Test that a candidate for a missing Host produces no message."""
        delivered = await router.relay_ice_candidate(
            IceCandidateModel(profile=viewer_profile, candidate="c4")
        )

        assert not delivered
        assert viewer.sent == []

    @pytest.mark.asyncio
    async def test_disconnected_target_is_not_delivered(
        self, router, registry, viewer_profile, host_profile, make_transport
    ):
        """Test that a closed transport still in the registry gets nothing."""
        viewer = make_transport(connected=False)
        await registry.upsert(Connection(viewer_profile, viewer))

        delivered = await router.relay_ice_candidate(
            IceCandidateModel(
                profile=host_profile,
                candidate="c5",
                viewer_profile=viewer_profile,
            )
        )

        assert not delivered
        assert viewer.sent == []
