"""
Rule-based ACL resolution for coordination tree nodes.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from shared.logging import get_logger
from .models import AclEntry, AclRule, Identity, Perms, READ_ACL_UNSAFE


class RuleBasedAclResolver:
    """Resolves the ACL of a node from an ordered list of path rules.

    Every rule whose pattern fully matches the path contributes its bits to
    the rule's identity; contributions for the same identity are OR-ed
    together. Rule order is kept for presentation only, the resolved
    permissions do not depend on it. When no rule matches, the default ACL
    is returned.
    """

    def __init__(self, rules: Iterable[AclRule], default_acl: Optional[Iterable[AclEntry]] = None):
        self.logger = get_logger("policy.acl_resolver")
        self._rules: Tuple[AclRule, ...] = tuple(rules)
        self._default_acl: Tuple[AclEntry, ...] = tuple(
            READ_ACL_UNSAFE if default_acl is None else default_acl
        )
        for rule in self._rules:
            self.logger.debug(
                "ACL rule registered",
                pattern=rule.pattern,
                perms=int(rule.perms),
                scheme=rule.identity.scheme
            )

    @classmethod
    def builder(cls) -> "RuleBasedAclResolverBuilder":
        return RuleBasedAclResolverBuilder()

    @property
    def rules(self) -> Tuple[AclRule, ...]:
        return self._rules

    def get_default_acl(self) -> List[AclEntry]:
        """Get the ACL applied to paths no rule matches."""
        return list(self._default_acl)

    def resolve(self, path: str) -> Dict[Identity, Perms]:
        """Compute the effective permissions per identity for a path.

        An empty result means no rule matched.
        """
        effective: Dict[Identity, Perms] = {}
        for rule in self._rules:
            if rule.matches(path):
                effective[rule.identity] = effective.get(rule.identity, Perms(0)) | rule.perms
        return effective

    def get_acl_for_path(self, path: str) -> List[AclEntry]:
        """Get the ACL entries to set on the node at ``path``."""
        effective = self.resolve(path)
        if not effective:
            self.logger.debug("No ACL rule matched, using default ACL", path=path)
            return self.get_default_acl()

        return [AclEntry(perms, identity) for identity, perms in effective.items()]


class RuleBasedAclResolverBuilder:
    """Fluent construction of a RuleBasedAclResolver."""

    def __init__(self):
        self._rules: List[AclRule] = []
        self._default_acl: List[AclEntry] = list(READ_ACL_UNSAFE)

    def default_acl(self, entries: Iterable[AclEntry]) -> "RuleBasedAclResolverBuilder":
        self._default_acl = list(entries)
        return self

    def rule(self, pattern: str, perms: int, identity: Identity) -> "RuleBasedAclResolverBuilder":
        # AclRule compiles the pattern, so a bad expression fails here
        self._rules.append(AclRule(pattern, Perms(perms), identity))
        return self

    def build(self) -> RuleBasedAclResolver:
        return RuleBasedAclResolver(self._rules, self._default_acl)
