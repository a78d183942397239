"""Network policy models - templates and billing-cycle metering rules."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


WARNING_DISABLED = -1
LIMIT_DISABLED = -1

CYCLE_DAY_MIN = 1
CYCLE_DAY_MAX = 31

# Byte thresholds are signed 64-bit on the wire
BYTES_MIN = -(2 ** 63)
BYTES_MAX = 2 ** 63 - 1


class MatchRule(str, Enum):
    """Class of network traffic a template meters."""

    MOBILE_ALL = "MOBILE_ALL"            # All mobile data for a subscriber
    MOBILE_3G_LOWER = "MOBILE_3G_LOWER"  # Mobile data on 3G or below
    MOBILE_4G = "MOBILE_4G"              # Mobile data on 4G
    WIFI = "WIFI"
    ETHERNET = "ETHERNET"

    @property
    def is_mobile(self) -> bool:
        return self in (MatchRule.MOBILE_ALL, MatchRule.MOBILE_3G_LOWER, MatchRule.MOBILE_4G)


class NetworkTemplate(BaseModel):
    """
    Immutable identifier for a class of network traffic.

    Two templates are equal when both match rule and subscriber id are equal.
    An empty subscriber id is stored as None so that two missing identifiers
    always compare equal.
    """

    model_config = ConfigDict(frozen=True)

    match_rule: MatchRule = Field(description="Kind of traffic matched")
    subscriber_id: Optional[str] = Field(
        default=None,
        description="Subscriber identifier (IMSI) for mobile templates",
    )

    @field_validator("subscriber_id")
    @classmethod
    def normalize_subscriber_id(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @classmethod
    def mobile_all(cls, subscriber_id: Optional[str]) -> "NetworkTemplate":
        return cls(match_rule=MatchRule.MOBILE_ALL, subscriber_id=subscriber_id)

    @classmethod
    def mobile_3g_lower(cls, subscriber_id: Optional[str]) -> "NetworkTemplate":
        return cls(match_rule=MatchRule.MOBILE_3G_LOWER, subscriber_id=subscriber_id)

    @classmethod
    def mobile_4g(cls, subscriber_id: Optional[str]) -> "NetworkTemplate":
        return cls(match_rule=MatchRule.MOBILE_4G, subscriber_id=subscriber_id)

    @classmethod
    def wifi(cls) -> "NetworkTemplate":
        return cls(match_rule=MatchRule.WIFI)

    @classmethod
    def ethernet(cls) -> "NetworkTemplate":
        return cls(match_rule=MatchRule.ETHERNET)

    def __str__(self) -> str:
        if self.subscriber_id:
            return f"{self.match_rule.value}[{self.subscriber_id}]"
        return self.match_rule.value


def _restrictiveness(value: int) -> float:
    """Map a threshold to a sort key where disabled is least restrictive."""
    if value == LIMIT_DISABLED:
        return float("inf")
    return value


class NetworkPolicy(BaseModel):
    """
    One billing-cycle metering rule bound to a template.

    Policies order by restrictiveness: a lower limit is more restrictive,
    then a lower warning. Disabled thresholds sort as +infinity.
    """

    model_config = ConfigDict(validate_assignment=True)

    template: NetworkTemplate = Field(description="Traffic this policy meters")
    cycle_day: int = Field(
        ge=CYCLE_DAY_MIN,
        le=CYCLE_DAY_MAX,
        description="Day of month the billing cycle starts",
    )
    warning_bytes: int = Field(
        default=WARNING_DISABLED,
        ge=BYTES_MIN,
        le=BYTES_MAX,
        description="Usage that triggers a warning (-1 = disabled)",
    )
    limit_bytes: int = Field(
        default=LIMIT_DISABLED,
        ge=BYTES_MIN,
        le=BYTES_MAX,
        description="Usage that stops data (-1 = disabled)",
    )

    @property
    def is_warning_enabled(self) -> bool:
        return self.warning_bytes != WARNING_DISABLED

    @property
    def is_limit_enabled(self) -> bool:
        return self.limit_bytes != LIMIT_DISABLED

    def restrictiveness_key(self) -> tuple[float, float]:
        """Sort key: ascending limit, then ascending warning."""
        return (_restrictiveness(self.limit_bytes), _restrictiveness(self.warning_bytes))

    def compare_to(self, other: "NetworkPolicy") -> int:
        """Return <0 if this policy is more restrictive than other, >0 if less, 0 on tie."""
        mine = self.restrictiveness_key()
        theirs = other.restrictiveness_key()
        if mine < theirs:
            return -1
        if mine > theirs:
            return 1
        return 0

    # Ordering is by restrictiveness only; __eq__ stays field equality
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NetworkPolicy):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, NetworkPolicy):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, NetworkPolicy):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, NetworkPolicy):
            return NotImplemented
        return self.compare_to(other) >= 0

    def clamped(self) -> "NetworkPolicy":
        """Coerce out-of-range thresholds (below -1) to the disabled sentinel."""
        updates = {}
        if self.limit_bytes < LIMIT_DISABLED:
            updates["limit_bytes"] = LIMIT_DISABLED
        if self.warning_bytes < WARNING_DISABLED:
            updates["warning_bytes"] = WARNING_DISABLED
        if updates:
            return self.model_copy(update=updates)
        return self

    def with_template(self, template: NetworkTemplate) -> "NetworkPolicy":
        """New policy carrying this policy's cycle day and thresholds for another template."""
        return NetworkPolicy(
            template=template,
            cycle_day=self.cycle_day,
            warning_bytes=self.warning_bytes,
            limit_bytes=self.limit_bytes,
        )
