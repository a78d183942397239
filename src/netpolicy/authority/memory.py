"""In-memory policy authority for local use, the reference service and tests."""

import logging
import threading
from typing import Iterable, List, Optional, Sequence

from netpolicy.authority.base import AuthorityError, PolicyAuthority
from netpolicy.policy.models import NetworkPolicy


logger = logging.getLogger(__name__)


class InMemoryPolicyAuthority(PolicyAuthority):
    """
    Thread-safe policy store held in process memory.

    Policies are copied on the way in and on the way out, so callers never
    alias the stored list. Duplicate templates are rejected on replace.
    """

    def __init__(self, policies: Optional[Iterable[NetworkPolicy]] = None):
        """
        Initialize the store.

        Args:
            policies: Initial policies (default: empty)
        """
        self._lock = threading.Lock()
        self._policies: List[NetworkPolicy] = []
        self.write_count = 0

        if policies is not None:
            self._policies = self._validated_copy(list(policies))

        logger.info(f"In-memory policy authority initialized with {len(self._policies)} policies")

    def fetch_all(self) -> List[NetworkPolicy]:
        with self._lock:
            return [policy.model_copy(deep=True) for policy in self._policies]

    def replace_all(self, policies: Sequence[NetworkPolicy]) -> None:
        stored = self._validated_copy(policies)
        with self._lock:
            self._policies = stored
            self.write_count += 1

        logger.debug(f"Stored {len(stored)} policies (write #{self.write_count})")

    def _validated_copy(self, policies: Sequence[NetworkPolicy]) -> List[NetworkPolicy]:
        """Copy the list, rejecting duplicate templates."""
        seen = set()
        for policy in policies:
            if policy.template in seen:
                raise AuthorityError(f"Duplicate policy for template: {policy.template}")
            seen.add(policy.template)
        return [policy.model_copy(deep=True) for policy in policies]
