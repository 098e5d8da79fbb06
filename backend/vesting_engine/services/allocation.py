"""Category-based allocation rules"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Mapping, Union

from vesting_engine.config import AllocationRuleConfig
from vesting_engine.errors import AllocationRuleMissing, InvalidCategory

BASIS_POINTS = 10_000


class BeneficiaryCategory(IntEnum):
    """Closed set of beneficiary categories"""
    SEED = 0
    TEAM = 1
    ADVISOR = 2


def parse_category(value: Union[int, str, BeneficiaryCategory]) -> BeneficiaryCategory:
    """Resolve a category from its integer tag or name."""
    if isinstance(value, BeneficiaryCategory):
        return value
    if isinstance(value, str) and not value.lstrip("-").isdigit():
        try:
            return BeneficiaryCategory[value.upper()]
        except KeyError:
            raise InvalidCategory(f"Unknown category: {value}")
    try:
        return BeneficiaryCategory(int(value))
    except (TypeError, ValueError):
        raise InvalidCategory(f"Unknown category: {value}")


@dataclass(frozen=True)
class FixedAllocation:
    """Every beneficiary in the category receives the same amount."""
    amount: int

    def allocation_for(self, total_supply: int) -> int:
        return self.amount


@dataclass(frozen=True)
class SupplyShareAllocation:
    """A share of total supply expressed in basis points, rounded down."""
    basis_points: int

    def allocation_for(self, total_supply: int) -> int:
        return (total_supply * self.basis_points) // BASIS_POINTS


AllocationRule = Union[FixedAllocation, SupplyShareAllocation]


def rule_from_config(config: AllocationRuleConfig) -> AllocationRule:
    if config.kind == "fixed":
        if config.amount <= 0:
            raise ValueError("Fixed allocation amount must be positive")
        return FixedAllocation(amount=config.amount)
    if not 0 < config.basis_points <= BASIS_POINTS:
        raise ValueError(f"basis_points must be in (0, {BASIS_POINTS}]")
    return SupplyShareAllocation(basis_points=config.basis_points)


class AllocationPolicy:
    """Maps each category to the rule that sizes its allocations."""

    def __init__(self, rules: Mapping[BeneficiaryCategory, AllocationRule]):
        self.rules: Dict[BeneficiaryCategory, AllocationRule] = dict(rules)

    @classmethod
    def from_config(cls, config: Mapping[str, AllocationRuleConfig]) -> "AllocationPolicy":
        """Build a policy from the `allocation_rules` setting (keys are category names)."""
        rules = {}
        for name, rule_config in config.items():
            rules[parse_category(name)] = rule_from_config(rule_config)
        return cls(rules)

    def allocation_for(self, category: BeneficiaryCategory, total_supply: int) -> int:
        rule = self.rules.get(category)
        if rule is None:
            raise AllocationRuleMissing(f"No allocation rule configured for {category.name.lower()}")
        return rule.allocation_for(total_supply)
