"""Write gating.

Demo deployments run read-only: the write policy is chosen once at startup
from configuration and handed to every service that creates, updates or
deletes data."""

from typing import Protocol

from fastapi import Request

DEMO_MODE_MESSAGE = "Demo mode - Create/Update/Delete operations are disabled"


class WriteNotAllowed(Exception):
    def __init__(self, message: str = DEMO_MODE_MESSAGE):
        super().__init__(message)
        self.message = message


class WritePolicy(Protocol):
    def is_write_allowed(self) -> bool: ...


class ReadWritePolicy:
    def is_write_allowed(self) -> bool:
        return True


class DemoModePolicy:
    def is_write_allowed(self) -> bool:
        return False


def policy_for(demo_mode: bool) -> WritePolicy:
    return DemoModePolicy() if demo_mode else ReadWritePolicy()


def ensure_write_allowed(policy: WritePolicy) -> None:
    if not policy.is_write_allowed():
        raise WriteNotAllowed()


def get_write_policy(request: Request) -> WritePolicy:
    """FastAPI dependency returning the policy installed by the app lifespan."""
    return request.app.state.write_policy
