"""Rule registry.

Holds the compliance rules the evaluation agent sends to the reasoning model.
A registry is seeded with the default rule set on construction and is then
mutated only through add_rule() and remove_rule().
"""

import threading

from shared.exceptions.errors import NotFoundError
from shared.helper.HelperConfig import HelperConfig
from shared.models.rule import Rule, RuleType


def default_rules() -> list[Rule]:
    """The rule set every registry starts with."""
    return [
        Rule(
            id="signature-check",
            name="Signature Verification",
            description="Document must contain a signature block or digital signature confirmation",
            type=RuleType.SIGNATURE_CHECK,
            priority=1,
            weight=0.3,
            mandatory=True,
        ),
        Rule(
            id="date-validation",
            name="Date Validation",
            description="Document date must be present and within acceptable range (not future-dated)",
            type=RuleType.DATE_VALIDATION,
            priority=1,
            weight=0.2,
            mandatory=True,
        ),
        Rule(
            id="approval-clause",
            name="Approval Clause",
            description=(
                "Must contain explicit approval language such as 'approved by', "
                "'authorized by', or 'confirmed by both parties'"
            ),
            type=RuleType.KEYWORD_PRESENCE,
            priority=2,
            weight=0.25,
            mandatory=True,
            condition="approved by|authorized by|confirmed by both parties",
        ),
        Rule(
            id="party-identification",
            name="Party Identification",
            description="Document must clearly identify all parties involved (names, company names, or official titles)",
            type=RuleType.SEMANTIC_MATCH,
            priority=2,
            weight=0.15,
            mandatory=False,
        ),
        Rule(
            id="completeness-check",
            name="Document Completeness",
            description=(
                "Document should not contain placeholders like [TO BE FILLED], [TBD], "
                "or blank fields in critical sections"
            ),
            type=RuleType.CUSTOM_REASONING,
            priority=3,
            weight=0.1,
            mandatory=False,
        ),
    ]


class RuleRegistry:
    """Thread-safe, in-memory set of rules keyed by id.

    Readers always get a list copy, so a concurrent add_rule()/remove_rule()
    can never hand out a partially updated rule set.
    """

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._rules: dict[str, Rule] = {}
        self._lock = threading.RLock()

        self.logging.info("Initializing default evaluation rules")
        for rule in default_rules():
            self.add_rule(rule)
        self.logging.info("Initialized %d evaluation rules", len(self._rules))

    ##########################################
    ############### MUTATION #################
    ##########################################

    def add_rule(self, rule: Rule) -> None:
        """Insert or replace the rule with rule.id (last write wins)."""
        with self._lock:
            self._rules[rule.id] = rule
        self.logging.debug("Added rule: %s - %s", rule.id, rule.name)

    def remove_rule(self, rule_id: str) -> None:
        """Delete the rule with rule_id; no-op if it does not exist."""
        with self._lock:
            removed = self._rules.pop(rule_id, None)
        if removed is not None:
            self.logging.info("Removed rule: %s", rule_id)

    ##########################################
    ################ QUERIES #################
    ##########################################

    def get_all(self) -> list[Rule]:
        """All rules in insertion order."""
        with self._lock:
            return list(self._rules.values())

    def get_by_type(self, rule_type: RuleType) -> list[Rule]:
        return [r for r in self.get_all() if r.type == rule_type]

    def get_mandatory(self) -> list[Rule]:
        return [r for r in self.get_all() if r.mandatory]

    def get_by_id(self, rule_id: str) -> Rule | None:
        with self._lock:
            return self._rules.get(rule_id)

    def require(self, rule_id: str) -> Rule:
        """Return the rule with rule_id.

        Raises:
            NotFoundError: If no such rule is registered.
        """
        rule = self.get_by_id(rule_id)
        if rule is None:
            raise NotFoundError(f"Rule not found: {rule_id}")
        return rule

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)
