"""Rule trees, their evaluation results and the applier that runs them."""
from .result import SUCCESS, Success, Failure, RuleResult, SchemaResult, Segment
from .nodes import (
    Rule,
    Predicate,
    And,
    Or,
    Not,
    Implication,
    Set,
    Each,
    Key,
    check,
    dig,
)
from .applier import RuleApplier

__all__ = [
    "SUCCESS",
    "Success",
    "Failure",
    "RuleResult",
    "SchemaResult",
    "Segment",
    "Rule",
    "Predicate",
    "And",
    "Or",
    "Not",
    "Implication",
    "Set",
    "Each",
    "Key",
    "check",
    "dig",
    "RuleApplier",
]
