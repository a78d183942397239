"""Tests for network policy models."""

import pytest
from pydantic import ValidationError

from netpolicy.policy import (
    LIMIT_DISABLED,
    WARNING_DISABLED,
    MatchRule,
    NetworkTemplate,
    NetworkPolicy,
)


class TestNetworkTemplate:
    """Test NetworkTemplate value semantics."""

    def test_equal_by_value(self):
        """Templates with the same rule and subscriber are equal."""
        a = NetworkTemplate(match_rule=MatchRule.MOBILE_4G, subscriber_id="310260000000001")
        b = NetworkTemplate.mobile_4g("310260000000001")

        assert a == b
        assert a is not b
        assert hash(a) == hash(b)

    def test_different_rule_not_equal(self):
        """Same subscriber with a different rule is a different template."""
        assert NetworkTemplate.mobile_4g("sub") != NetworkTemplate.mobile_3g_lower("sub")

    def test_different_subscriber_not_equal(self):
        """Same rule with a different subscriber is a different template."""
        assert NetworkTemplate.mobile_all("sub_a") != NetworkTemplate.mobile_all("sub_b")

    def test_empty_subscriber_equals_missing(self):
        """An empty subscriber id is treated as missing."""
        assert NetworkTemplate.mobile_all("") == NetworkTemplate.mobile_all(None)
        assert NetworkTemplate.mobile_all("").subscriber_id is None

    def test_template_is_immutable(self):
        """Templates cannot be changed after construction."""
        template = NetworkTemplate.wifi()

        with pytest.raises(ValidationError):
            template.match_rule = MatchRule.ETHERNET

    def test_is_mobile(self):
        """Only the mobile rules report is_mobile."""
        assert MatchRule.MOBILE_ALL.is_mobile
        assert MatchRule.MOBILE_3G_LOWER.is_mobile
        assert MatchRule.MOBILE_4G.is_mobile
        assert not MatchRule.WIFI.is_mobile
        assert not MatchRule.ETHERNET.is_mobile

    def test_str(self):
        """String form shows the rule and subscriber."""
        assert str(NetworkTemplate.mobile_4g("sub")) == "MOBILE_4G[sub]"
        assert str(NetworkTemplate.wifi()) == "WIFI"


class TestNetworkPolicy:
    """Test NetworkPolicy fields and helpers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.template = NetworkTemplate.mobile_all("sub")

    def test_defaults_disabled(self):
        """Thresholds default to disabled."""
        policy = NetworkPolicy(template=self.template, cycle_day=1)

        assert policy.warning_bytes == WARNING_DISABLED
        assert policy.limit_bytes == LIMIT_DISABLED
        assert not policy.is_warning_enabled
        assert not policy.is_limit_enabled

    @pytest.mark.parametrize("day", [0, 32, -1])
    def test_cycle_day_out_of_range(self, day):
        """Cycle day must be within 1-31."""
        with pytest.raises(ValidationError):
            NetworkPolicy(template=self.template, cycle_day=day)

    def test_assignment_validated(self):
        """Field assignment is validated and rejected values are not stored."""
        policy = NetworkPolicy(template=self.template, cycle_day=5)

        with pytest.raises(ValidationError):
            policy.cycle_day = 40

        assert policy.cycle_day == 5

    def test_bytes_exceed_signed_64_bit(self):
        """Thresholds are signed 64-bit values."""
        with pytest.raises(ValidationError):
            NetworkPolicy(template=self.template, cycle_day=1, limit_bytes=2 ** 63)

    def test_clamped_coerces_below_sentinel(self):
        """Values below -1 become the disabled sentinel."""
        policy = NetworkPolicy(
            template=self.template, cycle_day=1, warning_bytes=-7, limit_bytes=-2 ** 40
        )

        clamped = policy.clamped()

        assert clamped.warning_bytes == WARNING_DISABLED
        assert clamped.limit_bytes == LIMIT_DISABLED
        assert clamped.template == self.template

    def test_clamped_keeps_valid_values(self):
        """Values at or above -1 pass through unchanged."""
        policy = NetworkPolicy(
            template=self.template, cycle_day=1, warning_bytes=-1, limit_bytes=0
        )

        clamped = policy.clamped()

        assert clamped.warning_bytes == -1
        assert clamped.limit_bytes == 0

    def test_with_template_copies_values(self):
        """with_template carries cycle day and thresholds to a new template."""
        policy = NetworkPolicy(
            template=self.template, cycle_day=9, warning_bytes=100, limit_bytes=200
        )

        copy = policy.with_template(NetworkTemplate.mobile_4g("sub"))

        assert copy.template == NetworkTemplate.mobile_4g("sub")
        assert (copy.cycle_day, copy.warning_bytes, copy.limit_bytes) == (9, 100, 200)

    def test_json_shape(self):
        """Policies serialize with nested template and enum values."""
        policy = NetworkPolicy(template=self.template, cycle_day=3, limit_bytes=10)

        data = policy.model_dump(mode="json")

        assert data == {
            "template": {"match_rule": "MOBILE_ALL", "subscriber_id": "sub"},
            "cycle_day": 3,
            "warning_bytes": -1,
            "limit_bytes": 10,
        }


class TestPolicyOrdering:
    """Test restrictiveness ordering between policies."""

    def _policy(self, warning: int, limit: int) -> NetworkPolicy:
        return NetworkPolicy(
            template=NetworkTemplate.mobile_all("sub"),
            cycle_day=1,
            warning_bytes=warning,
            limit_bytes=limit,
        )

    def test_lower_limit_more_restrictive(self):
        """A lower limit compares lower."""
        assert self._policy(-1, 100) < self._policy(-1, 200)
        assert self._policy(-1, 100).compare_to(self._policy(-1, 200)) < 0

    def test_disabled_limit_least_restrictive(self):
        """A disabled limit sorts after any enabled limit."""
        assert self._policy(-1, 2 ** 62) < self._policy(-1, LIMIT_DISABLED)
        assert self._policy(-1, LIMIT_DISABLED) > self._policy(-1, 0)

    def test_warning_breaks_limit_tie(self):
        """With equal limits, the lower warning is more restrictive."""
        assert self._policy(50, 500) < self._policy(100, 500)
        assert self._policy(100, 500) < self._policy(WARNING_DISABLED, 500)

    def test_equal_thresholds_compare_zero(self):
        """Identical thresholds are a tie."""
        a = self._policy(10, 20)
        b = self._policy(10, 20)

        assert a.compare_to(b) == 0
        assert a <= b and a >= b
        assert not a < b

    def test_sorted(self):
        """Policies sort from most to least restrictive."""
        loose = self._policy(-1, -1)
        tight = self._policy(-1, 10)
        middle = self._policy(5, 100)

        assert sorted([loose, middle, tight]) == [tight, middle, loose]
