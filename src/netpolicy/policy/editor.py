"""
Policy Editor

Keeps an editable copy of the network policies held by a policy authority
and knows which policies can coexist. Edits apply to the local cache first
and are then pushed back in the background.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Tuple

from netpolicy.authority.base import AuthorityError, PolicyAuthority
from netpolicy.authority.config import config
from netpolicy.policy.errors import (
    ConstructionError,
    NoSuchPolicyError,
    PolicyEditorError,
    TransportError,
)
from netpolicy.policy.models import MatchRule, NetworkPolicy, NetworkTemplate


logger = logging.getLogger(__name__)


class PolicyEditor:
    """
    Editable cache of network policies backed by a PolicyAuthority.

    Invariant: at most one cached policy per template.

    Threading: foreground calls (read, write, lookups, edits) are expected
    from a single caller thread. write_async() runs write() on a worker
    pool; completion order across workers is not guaranteed. A failed
    background write is logged, kept for write_errors(), and the cache
    keeps its new values. After close() no further edits are accepted.
    """

    def __init__(self, authority: Optional[PolicyAuthority], write_workers: Optional[int] = None):
        """
        Initialize the policy editor.

        Args:
            authority: Remote policy authority (required)
            write_workers: Background writer threads (default: from config)

        Raises:
            ConstructionError: If authority is None
        """
        if authority is None:
            raise ConstructionError("PolicyEditor requires a policy authority")

        self.authority = authority
        self._policies: List[NetworkPolicy] = []
        self._pending: List[Future] = []
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=write_workers or config.write_workers,
            thread_name_prefix="policy-writer",
        )

        logger.info(f"Policy Editor initialized ({type(authority).__name__})")

    @property
    def policies(self) -> Tuple[NetworkPolicy, ...]:
        """Snapshot of the cached policies, in cache order."""
        return tuple(self._policies)

    def read(self) -> None:
        """
        Replace the cache with the authority's policies.

        Thresholds below -1 are clamped to the disabled sentinel. Any
        unwritten local edits are discarded.

        Raises:
            TransportError: If the authority cannot be read
        """
        try:
            fetched = self.authority.fetch_all()
        except AuthorityError as e:
            logger.error(f"Problem reading policies: {e}")
            raise TransportError("problem reading policies") from e

        policies: List[NetworkPolicy] = []
        seen = set()
        for policy in fetched:
            if policy.template in seen:
                logger.warning(f"Ignoring duplicate policy from authority: {policy.template}")
                continue
            seen.add(policy.template)
            policies.append(policy.clamped())

        self._policies = policies
        logger.info(f"Read {len(self._policies)} policies")

    def write(self) -> None:
        """
        Push the whole cache to the authority as a full replacement.

        Raises:
            TransportError: If the authority cannot be written
        """
        snapshot = [policy.model_copy() for policy in list(self._policies)]
        try:
            self.authority.replace_all(snapshot)
        except AuthorityError as e:
            logger.error(f"Problem writing policies: {e}")
            raise TransportError("problem writing policies") from e

        logger.info(f"Wrote {len(snapshot)} policies")

    def write_async(self) -> Future:
        """
        Run write() on the background writer without blocking.

        Returns:
            Future for the write; callers may ignore it. A failure is
            logged on the worker and reported by write_errors().

        Raises:
            PolicyEditorError: If the editor is closed
        """
        self._check_open()
        future = self._executor.submit(self.write)
        future.add_done_callback(self._on_write_done)

        # failed writes stay tracked until write_errors() collects them
        self._pending = [f for f in self._pending if not f.done() or _failed(f)]
        self._pending.append(future)
        return future

    def wait_for_pending_writes(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every background write issued so far has finished.

        Returns:
            True if all writes finished within the timeout
        """
        pending = list(self._pending)
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def write_errors(self) -> List[BaseException]:
        """
        Collect the failures of finished background writes.

        Each failure is reported once; collected writes are no longer tracked.

        Returns:
            Exceptions raised by failed writes, in submission order
        """
        failed = [f for f in self._pending if f.done() and _failed(f)]
        self._pending = [f for f in self._pending if f not in failed]
        return [f.exception() for f in failed]

    def close(self) -> None:
        """Finish queued background writes and stop the worker pool."""
        self._closed = True
        self._executor.shutdown(wait=True)
        self._pending.clear()

    def __enter__(self) -> "PolicyEditor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def _on_write_done(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Background policy write failed", exc_info=error)

    def get_policy(self, template: NetworkTemplate) -> Optional[NetworkPolicy]:
        """
        Find the cached policy for a template.

        Returns the entry itself, so mutating it mutates the cache.
        Prefer edit_policy() for changes.

        Returns:
            NetworkPolicy if found, None otherwise
        """
        for policy in self._policies:
            if policy.template == template:
                return policy
        return None

    def edit_policy(
        self,
        template: NetworkTemplate,
        mutate: Callable[[NetworkPolicy], None],
    ) -> NetworkPolicy:
        """
        Apply a change to the policy for a template and write it back.

        Args:
            template: Template whose policy to edit
            mutate: Function applied to the cached policy

        Returns:
            The edited policy

        Raises:
            NoSuchPolicyError: If no policy exists for the template
            PolicyEditorError: If the editor is closed
        """
        self._check_open()
        policy = self.get_policy(template)
        if policy is None:
            logger.warning(f"Edit requested for missing policy: {template}")
            raise NoSuchPolicyError(template)

        mutate(policy)
        self.write_async()
        return policy

    def set_policy_cycle_day(self, template: NetworkTemplate, cycle_day: int) -> None:
        self.edit_policy(template, lambda policy: setattr(policy, "cycle_day", cycle_day))

    def set_policy_warning_bytes(self, template: NetworkTemplate, warning_bytes: int) -> None:
        self.edit_policy(template, lambda policy: setattr(policy, "warning_bytes", warning_bytes))

    def set_policy_limit_bytes(self, template: NetworkTemplate, limit_bytes: int) -> None:
        self.edit_policy(template, lambda policy: setattr(policy, "limit_bytes", limit_bytes))

    def is_mobile_policy_split(self, subscriber_id: Optional[str]) -> bool:
        """
        Check whether a subscriber has separate 3G and 4G policies.

        Only the two split templates are considered; a MOBILE_ALL policy
        does not affect the answer.
        """
        subscriber_id = subscriber_id or None
        has_3g = False
        has_4g = False

        for policy in self._policies:
            template = policy.template
            if template.subscriber_id != subscriber_id:
                continue
            if template.match_rule == MatchRule.MOBILE_3G_LOWER:
                has_3g = True
            elif template.match_rule == MatchRule.MOBILE_4G:
                has_4g = True

        return has_3g and has_4g

    def set_mobile_policy_split(self, subscriber_id: Optional[str], split: bool) -> None:
        """
        Move a subscriber between one combined policy and separate 3G/4G policies.

        Combining keeps the more restrictive policy's values; when both
        limits are equal the 3G policy's values are kept. Splitting copies
        the combined policy into both split templates.

        Args:
            subscriber_id: Subscriber whose mobile policies to change
            split: True for separate 3G/4G policies, False for one combined policy

        Raises:
            NoSuchPolicyError: If a policy the transition needs is missing
            PolicyEditorError: If the editor is closed
        """
        self._check_open()
        before_split = self.is_mobile_policy_split(subscriber_id)

        template_3g = NetworkTemplate.mobile_3g_lower(subscriber_id)
        template_4g = NetworkTemplate.mobile_4g(subscriber_id)
        template_all = NetworkTemplate.mobile_all(subscriber_id)

        if split == before_split:
            # already in requested state
            return

        if before_split and not split:
            policy_3g = self._require_policy(template_3g)
            policy_4g = self._require_policy(template_4g)

            restrictive = self._more_restrictive(policy_3g, policy_4g)

            self._remove_policy(policy_3g)
            self._remove_policy(policy_4g)
            self._put_policy(restrictive.with_template(template_all))

            logger.info(
                f"Combined mobile policies for {subscriber_id or '<none>'} "
                f"(kept {restrictive.template.match_rule.value})"
            )
        else:
            policy_all = self._require_policy(template_all)

            self._remove_policy(policy_all)
            self._put_policy(policy_all.with_template(template_3g))
            self._put_policy(policy_all.with_template(template_4g))

            logger.info(f"Split mobile policy for {subscriber_id or '<none>'}")

        self.write_async()

    def _check_open(self) -> None:
        if self._closed:
            raise PolicyEditorError("PolicyEditor is closed")

    @staticmethod
    def _more_restrictive(policy_3g: NetworkPolicy, policy_4g: NetworkPolicy) -> NetworkPolicy:
        """4G wins only with a strictly lower limit; otherwise 3G."""
        limit_3g, _ = policy_3g.restrictiveness_key()
        limit_4g, _ = policy_4g.restrictiveness_key()
        if limit_4g < limit_3g:
            return policy_4g
        return policy_3g

    def _require_policy(self, template: NetworkTemplate) -> NetworkPolicy:
        policy = self.get_policy(template)
        if policy is None:
            logger.warning(f"Mobile split transition missing policy: {template}")
            raise NoSuchPolicyError(template)
        return policy

    def _remove_policy(self, policy: NetworkPolicy) -> None:
        # Identity, not equality: two policies may carry equal values
        self._policies = [p for p in self._policies if p is not policy]

    def _put_policy(self, policy: NetworkPolicy) -> None:
        """Append a policy, replacing any cached policy with the same template."""
        self._policies = [p for p in self._policies if p.template != policy.template]
        self._policies.append(policy)


def _failed(future: Future) -> bool:
    return not future.cancelled() and future.exception() is not None
