"""Authority module - the remote system of record for network policies."""

from netpolicy.authority.base import PolicyAuthority, AuthorityError
from netpolicy.authority.memory import InMemoryPolicyAuthority
from netpolicy.authority.client import PolicyServiceClient

__all__ = [
    "PolicyAuthority",
    "AuthorityError",
    "InMemoryPolicyAuthority",
    "PolicyServiceClient",
]
