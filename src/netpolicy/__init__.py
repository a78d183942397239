"""netpolicy - editable network usage policies synchronized with a policy authority."""

# policy models must load before the authority package, which depends on them
from netpolicy.policy import (
    MatchRule,
    NetworkTemplate,
    NetworkPolicy,
    PolicyEditor,
    PolicyEditorError,
    ConstructionError,
    TransportError,
    NoSuchPolicyError,
)
from netpolicy.authority import (
    PolicyAuthority,
    AuthorityError,
    InMemoryPolicyAuthority,
    PolicyServiceClient,
)

__version__ = "0.1.0"

__all__ = [
    "MatchRule",
    "NetworkTemplate",
    "NetworkPolicy",
    "PolicyEditor",
    "PolicyEditorError",
    "ConstructionError",
    "TransportError",
    "NoSuchPolicyError",
    "PolicyAuthority",
    "AuthorityError",
    "InMemoryPolicyAuthority",
    "PolicyServiceClient",
]
