"""
Risk evaluation rules.

Rules are checked in priority order and the first match wins:
  Rule1  amount > 20000            → HIGH_RISK
  Rule2  prior_count >= 3          → SUSPICIOUS   (the user's 4th+ transaction)
  otherwise                        → clean (no flag, no rule)

The evaluator is pure: the caller supplies the user's history count.
"""
from enum import Enum
from typing import NamedTuple, Optional


HIGH_AMOUNT_THRESHOLD = 20000
FREQUENCY_THRESHOLD = 3


class RiskFlag(str, Enum):
    HIGH_RISK = "HIGH_RISK"
    SUSPICIOUS = "SUSPICIOUS"


class RuleId(str, Enum):
    HIGH_AMOUNT = "Rule1"
    FREQUENCY = "Rule2"


class RiskVerdict(NamedTuple):
    risk_flag: Optional[RiskFlag] = None
    rule_triggered: Optional[RuleId] = None

    @property
    def is_flagged(self) -> bool:
        return self.risk_flag is not None


CLEAN = RiskVerdict()


def evaluate(amount: float, prior_count: int) -> RiskVerdict:
    """Classify one transaction attempt given the user's committed history count."""
    # Magnitude dominates frequency, so Rule1 is checked regardless of history
    if amount > HIGH_AMOUNT_THRESHOLD:
        return RiskVerdict(RiskFlag.HIGH_RISK, RuleId.HIGH_AMOUNT)

    if prior_count >= FREQUENCY_THRESHOLD:
        return RiskVerdict(RiskFlag.SUSPICIOUS, RuleId.FREQUENCY)

    return CLEAN
