"""
Deterministic, backward-compatible ordering of function lists.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pgcatgen.models import Proc
from pgcatgen.ordering.rules import RuleSet

logger = logging.getLogger(__name__)


class OrderReconciler:
    """
    Orders and filters the functions of one schema or extension.

    1. Stable sort by Proc.sort_key, independent of database scan order.
    2. Within each group of same-named overloads, stable sort by descending
       override priority; overloads without a matching rule keep their
       base order behind the ones that have one.
    3. Drop functions matched by an exclusion rule.
    """

    def __init__(self, rules: Optional[RuleSet] = None):
        self.rules = rules or RuleSet()

    def reconcile(self, scope: str, procs: Sequence[Proc]) -> List[Proc]:
        """
        Return a new, reconciled list; ``procs`` is left untouched.

        Args:
            scope: Schema or extension name the rules are keyed by
            procs: Normalized functions in any order

        Returns:
            Ordered functions without excluded entries
        """
        rules = self.rules.for_scope(scope)

        ordered = sorted(procs, key=lambda p: p.sort_key)
        # sort_key starts with the name, so names stay grouped here
        ordered = sorted(
            ordered,
            key=lambda p: (p.name, -rules.priority_of(scope, p)),
        )

        kept = []
        for proc in ordered:
            if rules.is_excluded(scope, proc):
                logger.debug(f"Excluding {scope}.{proc.signature}")
                continue
            kept.append(proc)

        dropped = len(ordered) - len(kept)
        if dropped:
            logger.info(f"Excluded {dropped} functions from {scope}")
        return kept
