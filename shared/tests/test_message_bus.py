"""Message bus, result type and access policy."""

from __future__ import annotations

from dataclasses import dataclass
from types import SimpleNamespace

import pytest

from shared.application.message_bus import MessageBus
from shared.application.policy import AccessPolicy, Action
from shared.domain.base import DomainEvent
from shared.domain.errors import Conflict, Forbidden
from shared.domain.result import as_result


@dataclass(kw_only=True)
class Pinged(DomainEvent):
    value: int


def test_failing_handler_does_not_stop_the_others() -> None:
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(Pinged, broken)
    bus.register_event_handler(Pinged, lambda event: received.append(event.value))

    bus.publish(Pinged(value=7))

    assert received == [7]


def test_registering_twice_is_a_noop() -> None:
    bus = MessageBus()
    handler = lambda event: None  # noqa: E731
    bus.register_event_handler(Pinged, handler)
    bus.register_event_handler(Pinged, handler)
    assert bus.handlers_for(Pinged) == [handler]


def test_event_serializes_to_plain_dict() -> None:
    data = Pinged(aggregate_id=3, value=1).to_dict()
    assert data["aggregate_id"] == 3
    assert isinstance(data["event_id"], str)


def test_as_result_captures_domain_errors_only() -> None:
    @as_result
    def conflicting():
        raise Conflict("taken")

    @as_result
    def broken():
        raise RuntimeError("unexpected")

    result = conflicting()
    assert not result.is_ok
    with pytest.raises(Conflict):
        result.unwrap()
    with pytest.raises(RuntimeError):
        broken()


def _user(pk, admin=False):
    return SimpleNamespace(pk=pk, is_authenticated=True, is_admin_role=lambda: admin)


def test_policy_rules() -> None:
    policy = AccessPolicy()
    booking = SimpleNamespace(pk=1, owner_id=10, manager_id=20)
    owner, manager, stranger, admin = _user(10), _user(20), _user(30), _user(40, admin=True)

    assert policy.is_allowed(owner, Action.VIEW, booking)
    assert policy.is_allowed(manager, Action.VIEW, booking)
    assert not policy.is_allowed(stranger, Action.VIEW, booking)
    assert policy.is_allowed(admin, Action.DELETE, booking)

    assert not policy.is_allowed(owner, Action.UPDATE_STATUS, booking)
    assert policy.is_allowed(manager, Action.UPDATE_STATUS, booking)
    assert policy.is_allowed(owner, Action.PAY, booking)
    assert not policy.is_allowed(manager, Action.PAY, booking)

    with pytest.raises(Forbidden):
        policy.require(stranger, Action.CANCEL, booking)


def test_anonymous_is_never_allowed() -> None:
    anonymous = SimpleNamespace(pk=None, is_authenticated=False)
    resource = SimpleNamespace(owner_id=None, manager_id=None)
    assert not AccessPolicy().is_allowed(anonymous, Action.VIEW, resource)
