"""
Ordering module: base sort, override rules and exclusions.
"""

from pgcatgen.ordering.rules import ExclusionRule, OverrideRule, RuleSet, signature_matches
from pgcatgen.ordering.reconciler import OrderReconciler

__all__ = [
    "ExclusionRule",
    "OverrideRule",
    "RuleSet",
    "signature_matches",
    "OrderReconciler",
]
