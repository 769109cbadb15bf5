"""Rule-based transaction categorization.

Rules are evaluated in order and the first match wins, so narrow rules
(airtime, bills) sit above broad ones (transfers). A record no rule claims
is assigned ``Uncategorized``; categorization never rejects a record.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from momoetl.domain.entities import CategoryAssignment, NormalizedRecord, PartyType

UNCATEGORIZED = "Uncategorized"
DEFAULT_RULE_ID = "default"

# Seeded categories and their descriptions
DEFAULT_CATEGORIES: list[tuple[str, str]] = [
    ("Money Transfer", "Person-to-person money transfer"),
    ("Bill Payment", "Utility and service bill payments"),
    ("Airtime Purchase", "Mobile airtime top-up"),
    ("Merchant Payment", "Payment to registered merchants"),
    ("Cash Withdrawal", "Cash withdrawal from agents"),
    (UNCATEGORIZED, "Records no categorization rule matched"),
]


@dataclass(frozen=True)
class Rule:
    """One categorization rule.

    Every condition that is set must hold for the rule to match; a rule with
    no conditions matches everything.
    """

    rule_id: str
    category: str
    pattern: Optional[re.Pattern] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    receiver_types: frozenset[PartyType] = frozenset()
    confidence: float = 0.9

    def matches(self, record: NormalizedRecord) -> bool:
        """Return True if the record satisfies every condition of the rule."""
        if self.pattern is not None and not self.pattern.search(record.description):
            return False
        if self.min_amount is not None and record.amount < self.min_amount:
            return False
        if self.max_amount is not None and record.amount > self.max_amount:
            return False
        if self.receiver_types and record.receiver_type not in self.receiver_types:
            return False
        return True


def _keywords(*words: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(words) + r")\b", re.IGNORECASE)


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("airtime-keyword", "Airtime Purchase", _keywords("airtime", "bundles?", "top[- ]?up", "recharge")),
    Rule(
        "bill-keyword",
        "Bill Payment",
        _keywords("bills?", "electricity", "water", "utility", "yaka", "umeme", "cash power", "tv subscription"),
    ),
    Rule("withdrawal-keyword", "Cash Withdrawal", _keywords("withdrawn?", "withdrawal", "cash ?out")),
    Rule(
        "merchant-keyword",
        "Merchant Payment",
        _keywords("merchant", "payment to", "paid to", "purchase", "goods", "pos"),
    ),
    Rule("agent-receiver", "Cash Withdrawal", receiver_types=frozenset({PartyType.AGENT}), confidence=0.7),
    Rule("business-receiver", "Merchant Payment", receiver_types=frozenset({PartyType.BUSINESS}), confidence=0.7),
    Rule(
        "transfer-keyword",
        "Money Transfer",
        _keywords("transfer(?:red)?", "sent", "send", "received", "payment", "refund", "commission"),
        confidence=0.8,
    ),
)


class Categorizer:
    """Assigns one category to each normalized record."""

    def __init__(self, rules: Optional[Sequence[Rule]] = None):
        """Initialize categorizer.

        Args:
            rules: Ordered rules; defaults to DEFAULT_RULES
        """
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES

    def categorize(self, record: NormalizedRecord) -> CategoryAssignment:
        """Return the assignment from the first matching rule.

        Args:
            record: Normalized record

        Returns:
            CategoryAssignment; ``Uncategorized`` with rule id ``default``
            and confidence 0 when no rule matches
        """
        for rule in self.rules:
            if rule.matches(record):
                return CategoryAssignment(
                    category=rule.category,
                    rule_id=rule.rule_id,
                    confidence=rule.confidence,
                )
        return CategoryAssignment(category=UNCATEGORIZED, rule_id=DEFAULT_RULE_ID, confidence=0.0)

    @property
    def categories(self) -> list[str]:
        """Category names the rules can produce, including Uncategorized."""
        names = []
        for rule in self.rules:
            if rule.category not in names:
                names.append(rule.category)
        names.append(UNCATEGORIZED)
        return names
