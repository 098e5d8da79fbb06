"""Unit tests for category allocation rules"""
import pytest

from vesting_engine.config import AllocationRuleConfig
from vesting_engine.errors import AllocationRuleMissing, InvalidCategory
from vesting_engine.services.allocation import (
    AllocationPolicy,
    BeneficiaryCategory,
    FixedAllocation,
    SupplyShareAllocation,
    parse_category,
    rule_from_config,
)


class TestParseCategory:
    """Tests for resolving category tags"""

    def test_integer_tags(self):
        assert parse_category(0) is BeneficiaryCategory.SEED
        assert parse_category(1) is BeneficiaryCategory.TEAM
        assert parse_category(2) is BeneficiaryCategory.ADVISOR

    def test_names(self):
        assert parse_category("team") is BeneficiaryCategory.TEAM
        assert parse_category("ADVISOR") is BeneficiaryCategory.ADVISOR

    def test_numeric_string(self):
        assert parse_category("2") is BeneficiaryCategory.ADVISOR

    def test_enum_passthrough(self):
        assert parse_category(BeneficiaryCategory.SEED) is BeneficiaryCategory.SEED

    @pytest.mark.parametrize("value", [3, -1, "founder", "-1", "", None])
    def test_outside_closed_set(self, value):
        with pytest.raises(InvalidCategory):
            parse_category(value)


class TestRules:
    """Tests for individual allocation rules"""

    def test_fixed(self):
        assert FixedAllocation(1000).allocation_for(total_supply=10) == 1000

    def test_supply_share(self):
        assert SupplyShareAllocation(250).allocation_for(total_supply=1_000_000) == 25_000

    def test_supply_share_rounds_down(self):
        assert SupplyShareAllocation(1).allocation_for(total_supply=19_999) == 1

    def test_rule_from_fixed_config(self):
        rule = rule_from_config(AllocationRuleConfig(kind="fixed", amount=500))
        assert rule == FixedAllocation(500)

    def test_rule_from_share_config(self):
        rule = rule_from_config(AllocationRuleConfig(kind="supply_share", basis_points=1500))
        assert rule == SupplyShareAllocation(1500)

    def test_rejects_non_positive_fixed(self):
        with pytest.raises(ValueError):
            rule_from_config(AllocationRuleConfig(kind="fixed", amount=0))

    def test_rejects_share_above_whole_supply(self):
        with pytest.raises(ValueError):
            rule_from_config(AllocationRuleConfig(kind="supply_share", basis_points=10_001))


class TestAllocationPolicy:
    """Tests for the category -> rule lookup"""

    def test_from_config(self):
        policy = AllocationPolicy.from_config({
            "seed": AllocationRuleConfig(kind="fixed", amount=100),
            "team": AllocationRuleConfig(kind="supply_share", basis_points=1000),
        })
        assert policy.allocation_for(BeneficiaryCategory.SEED, 50_000) == 100
        assert policy.allocation_for(BeneficiaryCategory.TEAM, 50_000) == 5_000

    def test_missing_rule(self):
        policy = AllocationPolicy({BeneficiaryCategory.SEED: FixedAllocation(100)})
        with pytest.raises(AllocationRuleMissing):
            policy.allocation_for(BeneficiaryCategory.ADVISOR, 50_000)

    def test_unknown_category_name_in_config(self):
        with pytest.raises(InvalidCategory):
            AllocationPolicy.from_config({"founder": AllocationRuleConfig(kind="fixed", amount=1)})

    def test_empty_config_has_no_rules(self):
        assert AllocationPolicy.from_config({}).rules == {}
