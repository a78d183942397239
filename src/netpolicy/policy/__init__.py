"""Policy module - network policy models and the policy editor."""

from netpolicy.policy.models import (
    LIMIT_DISABLED,
    WARNING_DISABLED,
    MatchRule,
    NetworkTemplate,
    NetworkPolicy,
)
from netpolicy.policy.errors import (
    PolicyEditorError,
    ConstructionError,
    TransportError,
    NoSuchPolicyError,
)
from netpolicy.policy.editor import PolicyEditor

__all__ = [
    "LIMIT_DISABLED",
    "WARNING_DISABLED",
    "MatchRule",
    "NetworkTemplate",
    "NetworkPolicy",
    "PolicyEditorError",
    "ConstructionError",
    "TransportError",
    "NoSuchPolicyError",
    "PolicyEditor",
]
