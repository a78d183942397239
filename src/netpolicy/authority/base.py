"""
Policy Authority contract.

The authority is the system of record for network policies. The editor only
ever reads the full list and replaces the full list.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from netpolicy.policy.models import NetworkPolicy


class AuthorityError(Exception):
    """Communication-layer failure talking to a policy authority."""


class PolicyAuthority(ABC):
    """Abstract base class for all policy authorities."""

    @abstractmethod
    def fetch_all(self) -> List[NetworkPolicy]:
        """
        Fetch every policy held by the authority.

        Returns:
            List of policies, owned by the caller

        Raises:
            AuthorityError: If the authority cannot be reached
        """
        pass

    @abstractmethod
    def replace_all(self, policies: Sequence[NetworkPolicy]) -> None:
        """
        Replace the authority's policies with the given list.

        Args:
            policies: Complete new policy list (not a delta)

        Raises:
            AuthorityError: If the authority cannot be reached or rejects the list
        """
        pass
