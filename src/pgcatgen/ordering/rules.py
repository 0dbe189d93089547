"""
Override and exclusion rules for the order reconciler.

The analysis engine resolves overloaded functions positionally, and its
regression tests pin the order of a previously hand-curated catalog. The
rules below reproduce that order. They are plain data: each one is keyed by
scope (schema or extension name), function name and argument signature.

Example YAML:

    overrides:
      - scope: pg_catalog
        name: lower
        arg_types: [text]
        priority: 1
    exclusions:
      - scope: pg_catalog
        name: concat
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pgcatgen.errors import ConfigError
from pgcatgen.models import Proc

logger = logging.getLogger(__name__)

WILDCARD = "*"


def signature_matches(pattern: Optional[Sequence[str]], arg_types: Sequence[str]) -> bool:
    """
    Match argument types against a pattern.

    ``None`` matches any signature. Otherwise the pattern must have one entry
    per argument, each either a literal type name or ``*``.
    """
    if pattern is None:
        return True
    if len(pattern) != len(arg_types):
        return False
    return all(p == WILDCARD or p == t for p, t in zip(pattern, arg_types))


@dataclass(frozen=True)
class OverrideRule:
    """Forces matching overloads ahead of their same-named siblings."""
    scope: str
    name: str
    arg_types: Optional[tuple] = None
    priority: int = 1
    reason: str = ""

    def matches(self, scope: str, proc: Proc) -> bool:
        return (
            scope == self.scope
            and proc.name == self.name
            and signature_matches(self.arg_types, proc.arg_types)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OverrideRule:
        """Create from dictionary."""
        scope, name, arg_types = _rule_identity(data, "override")
        priority = data.get("priority", 1)
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise ConfigError(f"override {scope}.{name}: priority must be an integer")
        return cls(
            scope=scope,
            name=name,
            arg_types=arg_types,
            priority=priority,
            reason=data.get("reason", ""),
        )


@dataclass(frozen=True)
class ExclusionRule:
    """Drops matching functions from the output."""
    scope: str
    name: str
    arg_types: Optional[tuple] = None
    reason: str = ""

    def matches(self, scope: str, proc: Proc) -> bool:
        return (
            scope == self.scope
            and proc.name == self.name
            and signature_matches(self.arg_types, proc.arg_types)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExclusionRule:
        """Create from dictionary."""
        scope, name, arg_types = _rule_identity(data, "exclusion")
        return cls(scope=scope, name=name, arg_types=arg_types, reason=data.get("reason", ""))


def _rule_identity(data: Any, kind: str):
    if not isinstance(data, dict):
        raise ConfigError(f"{kind} rule must be a mapping, got {data!r}")
    try:
        scope = str(data["scope"])
        name = str(data["name"])
    except KeyError as e:
        raise ConfigError(f"{kind} rule is missing {e.args[0]!r}: {data!r}") from e

    arg_types = data.get("arg_types")
    if arg_types is not None:
        if not isinstance(arg_types, list):
            raise ConfigError(f"{kind} {scope}.{name}: arg_types must be a list")
        arg_types = tuple(str(t) for t in arg_types)
    return scope, name, arg_types


@dataclass
class RuleSet:
    """Ordered override rules plus exclusions."""
    overrides: List[OverrideRule] = field(default_factory=list)
    exclusions: List[ExclusionRule] = field(default_factory=list)

    def priority_of(self, scope: str, proc: Proc) -> int:
        """Priority of the first override matching ``proc``; 0 if none does."""
        for rule in self.overrides:
            if rule.matches(scope, proc):
                return rule.priority
        return 0

    def is_excluded(self, scope: str, proc: Proc) -> bool:
        return any(rule.matches(scope, proc) for rule in self.exclusions)

    def for_scope(self, scope: str) -> RuleSet:
        """Subset of rules that apply to one schema or extension."""
        return RuleSet(
            overrides=[r for r in self.overrides if r.scope == scope],
            exclusions=[r for r in self.exclusions if r.scope == scope],
        )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> RuleSet:
        """Create from a mapping with ``overrides`` and ``exclusions`` lists."""
        data = data or {}
        rules = cls(
            overrides=[OverrideRule.from_dict(r) for r in data.get("overrides") or []],
            exclusions=[ExclusionRule.from_dict(r) for r in data.get("exclusions") or []],
        )
        logger.debug(
            f"Loaded {len(rules.overrides)} override and "
            f"{len(rules.exclusions)} exclusion rules"
        )
        return rules
