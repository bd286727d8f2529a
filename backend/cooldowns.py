"""Cooldown policy: per-payor cooldown periods plus the due-soon and overdue windows."""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Dict, Mapping, Optional

from models import EligibilityStatus, PayorCategory

ENV_PPO_COOLDOWN = "PPO_COOLDOWN_DAYS"
ENV_MEDICARE_COOLDOWN = "MEDICARE_COOLDOWN_DAYS"
ENV_GRACE_WINDOW = "DUE_SOON_GRACE_DAYS"
ENV_OVERDUE_WINDOW = "OVERDUE_WINDOW_DAYS"


@dataclass(frozen=True)
class CooldownPolicy:
    ppoCooldownDays: int = 180
    medicareCooldownDays: int = 365
    graceWindowDays: int = 30
    overdueWindowDays: int = 90

    def cooldown_for(self, payor: PayorCategory) -> int:
        if payor == PayorCategory.MEDICARE:
            return self.medicareCooldownDays
        return self.ppoCooldownDays

    def status_for(self, days_since: int, cooldown_days: int) -> Optional[EligibilityStatus]:
        """
        Classify elapsed days against a cooldown.

        Past cooldown + overdue window (exclusive) is overdue, at or past the
        cooldown is eligible, within the grace window before it is due soon.
        Returns None when the patient is not yet due.
        """
        if days_since > cooldown_days + self.overdueWindowDays:
            return EligibilityStatus.OVERDUE
        if days_since >= cooldown_days:
            return EligibilityStatus.ELIGIBLE
        if days_since >= cooldown_days - self.graceWindowDays:
            return EligibilityStatus.DUE_SOON
        return None

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


DEFAULT_POLICY = CooldownPolicy()


def _read_days(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a whole number of days, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def load_policy_from_env(env: Optional[Mapping[str, str]] = None) -> CooldownPolicy:
    """Build a policy from environment variables, falling back to the defaults."""
    env = os.environ if env is None else env
    return CooldownPolicy(
        ppoCooldownDays=_read_days(env, ENV_PPO_COOLDOWN, DEFAULT_POLICY.ppoCooldownDays),
        medicareCooldownDays=_read_days(env, ENV_MEDICARE_COOLDOWN, DEFAULT_POLICY.medicareCooldownDays),
        graceWindowDays=_read_days(env, ENV_GRACE_WINDOW, DEFAULT_POLICY.graceWindowDays),
        overdueWindowDays=_read_days(env, ENV_OVERDUE_WINDOW, DEFAULT_POLICY.overdueWindowDays),
    )
