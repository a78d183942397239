"""Errors raised by the policy editor."""

from typing import Optional

from netpolicy.policy.models import NetworkTemplate


class PolicyEditorError(Exception):
    """Base class for policy editor failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConstructionError(PolicyEditorError, ValueError):
    """Editor was created without a policy authority."""


class TransportError(PolicyEditorError, RuntimeError):
    """
    Communication with the policy authority failed.

    The underlying AuthorityError is chained as __cause__. Never retried.
    """


class NoSuchPolicyError(PolicyEditorError, LookupError):
    """A mutation targeted a template that has no cached policy."""

    def __init__(self, template: NetworkTemplate, message: Optional[str] = None):
        self.template = template
        super().__init__(message or f"No policy for template: {template}")
