"""User domain events."""

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class UserRegistered(DomainEvent):
    """
    Event: a new account was created through the public API

    Triggers:
    - Welcome email (user_registration channel)
    """
    user_id: int
    email: str
