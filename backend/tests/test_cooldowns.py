"""
Tests for cooldowns.py - policy lookups and environment overrides
"""
import pytest

from cooldowns import DEFAULT_POLICY, CooldownPolicy, load_policy_from_env
from models import EligibilityStatus, PayorCategory


class TestCooldownPolicy:
    """Default table and status thresholds"""

    def test_defaults(self):
        assert DEFAULT_POLICY.to_dict() == {
            "ppoCooldownDays": 180,
            "medicareCooldownDays": 365,
            "graceWindowDays": 30,
            "overdueWindowDays": 90,
        }

    def test_cooldown_for(self):
        assert DEFAULT_POLICY.cooldown_for(PayorCategory.PPO) == 180
        assert DEFAULT_POLICY.cooldown_for(PayorCategory.MEDICARE) == 365

    @pytest.mark.parametrize("days, expected", [
        (0, None),
        (149, None),
        (150, EligibilityStatus.DUE_SOON),
        (179, EligibilityStatus.DUE_SOON),
        (180, EligibilityStatus.ELIGIBLE),
        (270, EligibilityStatus.ELIGIBLE),
        (271, EligibilityStatus.OVERDUE),
    ])
    def test_status_for_ppo_cooldown(self, days, expected):
        assert DEFAULT_POLICY.status_for(days, 180) == expected

    def test_policy_is_immutable(self):
        with pytest.raises(Exception):
            DEFAULT_POLICY.ppoCooldownDays = 1


class TestLoadPolicyFromEnv:
    """Environment overrides"""

    def test_empty_env_gives_defaults(self):
        assert load_policy_from_env({}) == CooldownPolicy()

    def test_overrides(self):
        policy = load_policy_from_env({
            "PPO_COOLDOWN_DAYS": "90",
            "MEDICARE_COOLDOWN_DAYS": " 400 ",
            "DUE_SOON_GRACE_DAYS": "14",
            "OVERDUE_WINDOW_DAYS": "60",
        })
        assert policy == CooldownPolicy(
            ppoCooldownDays=90,
            medicareCooldownDays=400,
            graceWindowDays=14,
            overdueWindowDays=60,
        )

    def test_blank_value_uses_default(self):
        assert load_policy_from_env({"PPO_COOLDOWN_DAYS": ""}).ppoCooldownDays == 180

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("OVERDUE_WINDOW_DAYS", "60")
        assert load_policy_from_env().overdueWindowDays == 60

    def test_non_integer_raises_with_variable_name(self):
        with pytest.raises(ValueError, match="PPO_COOLDOWN_DAYS"):
            load_policy_from_env({"PPO_COOLDOWN_DAYS": "six months"})

    def test_negative_raises(self):
        with pytest.raises(ValueError, match="DUE_SOON_GRACE_DAYS"):
            load_policy_from_env({"DUE_SOON_GRACE_DAYS": "-1"})
