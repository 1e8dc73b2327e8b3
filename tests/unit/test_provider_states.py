from __future__ import annotations

import asyncio
import json

import httpx

from pactverify.provider_states import ProviderStateChangeUrl, ProviderStateCoordinator
from pactverify.typing.enums import StateAction
from pactverify.typing.models import ExpectedRequest, ExpectedResponse, Interaction, ProviderStateRegistration


def _interaction(*states: str) -> Interaction:
    return Interaction(
        description="d",
        provider_states=states,
        request=ExpectedRequest(method="GET"),
        response=ExpectedResponse(status=200),
    )


def test_setup_and_teardown_call_registered_hooks_in_order() -> None:
    events: list[str] = []
    coordinator = ProviderStateCoordinator(
        [
            ProviderStateRegistration(
                state=label,
                setup=lambda state: events.append(f"up:{state}"),
                teardown=lambda state: events.append(f"down:{state}"),
            )
            for label in ("a", "b")
        ],
    )
    interaction = _interaction("a", "b")

    assert coordinator.setup(interaction) == []
    assert coordinator.teardown(interaction) == []
    assert events == ["up:a", "up:b", "down:b", "down:a"]


def test_last_registration_for_a_label_wins() -> None:
    events: list[str] = []
    coordinator = ProviderStateCoordinator(
        [
            ProviderStateRegistration(state="a", setup=lambda state: events.append("first")),
            ProviderStateRegistration(state="a", setup=lambda state: events.append("second")),
        ],
    )

    coordinator.setup(_interaction("a"))

    assert events == ["second"]


def test_unregistered_label_is_not_an_error() -> None:
    assert ProviderStateCoordinator().setup(_interaction("unknown")) == []


def test_failing_setup_is_reported_and_stops_later_setups() -> None:
    events: list[str] = []

    def _boom(state: str) -> None:
        raise RuntimeError("database down")

    coordinator = ProviderStateCoordinator(
        [
            ProviderStateRegistration(state="a", setup=_boom),
            ProviderStateRegistration(state="b", setup=lambda state: events.append(state)),
        ],
    )

    errors = coordinator.setup(_interaction("a", "b"))

    assert errors == ["Provider state setup failed for 'a': database down"]
    assert events == []


def test_failing_teardown_becomes_a_warning_and_others_still_run() -> None:
    events: list[str] = []

    def _boom(state: str) -> None:
        raise RuntimeError("cannot clean")

    coordinator = ProviderStateCoordinator(
        [
            ProviderStateRegistration(state="a", teardown=lambda state: events.append(state)),
            ProviderStateRegistration(state="b", teardown=_boom),
        ],
    )

    warnings = coordinator.teardown(_interaction("a", "b"))

    assert warnings == ["Provider state teardown failed for 'b': cannot clean"]
    assert events == ["a"]


def test_coroutine_hooks_are_awaited() -> None:
    events: list[str] = []

    async def _setup(state: str) -> None:
        await asyncio.sleep(0)
        events.append(state)

    coordinator = ProviderStateCoordinator([ProviderStateRegistration(state="a", setup=_setup)])

    assert coordinator.setup(_interaction("a")) == []
    assert events == ["a"]


def test_state_change_url_posts_state_payload() -> None:
    bodies: list[dict[str, object]] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        handler = ProviderStateChangeUrl("http://provider.test/states", client, "web")
        handler.handle("a user exists", StateAction.SETUP)

    assert bodies == [{"consumer": "web", "state": "a user exists", "states": ["a user exists"], "action": "setup"}]


def test_state_change_url_error_status_fails_setup() -> None:
    with httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500))) as client:
        coordinator = ProviderStateCoordinator(
            fallback=ProviderStateChangeUrl("http://provider.test/states", client, "web"),
        )
        errors = coordinator.setup(_interaction("a user exists"))

    assert errors == ["Provider state setup failed for 'a user exists': POST http://provider.test/states answered HTTP 500"]


def test_prepare_reports_only_labels_whose_setup_completed() -> None:
    torn: list[str] = []

    def _boom(state: str) -> None:
        raise RuntimeError("database down")

    coordinator = ProviderStateCoordinator(
        [
            ProviderStateRegistration(state=label, setup=_boom if label == "b" else None, teardown=torn.append)
            for label in ("a", "b", "c")
        ],
    )
    interaction = _interaction("a", "b", "c")

    prepared, errors = coordinator.prepare(interaction)
    coordinator.teardown(interaction, prepared)

    assert prepared == ["a"]
    assert errors == ["Provider state setup failed for 'b': database down"]
    assert torn == ["a"]
