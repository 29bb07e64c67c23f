"""
ACL data models for the Policy Service.
"""

import re
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Any, List

from pydantic import BaseModel, Field

from shared.errors import ValidationError


class Perms(IntFlag):
    """Coordination protocol permission bits."""
    READ = 1
    WRITE = 2
    CREATE = 4
    DELETE = 8
    ADMIN = 16

    CRWD = CREATE | READ | WRITE | DELETE
    ALL = READ | WRITE | CREATE | DELETE | ADMIN

    def names(self) -> List[str]:
        """Names of the single bits set, in bit order."""
        return [
            perm.name for perm in (Perms.READ, Perms.WRITE, Perms.CREATE, Perms.DELETE, Perms.ADMIN)
            if perm in self
        ]


@dataclass(frozen=True)
class Identity:
    """Authenticated principal: a scheme name plus a credential string."""
    scheme: str
    id: str

    def to_dict(self) -> Dict[str, str]:
        return {"scheme": self.scheme, "id": self.id}


ANYONE_ID_UNSAFE = Identity("world", "anyone")


@dataclass(frozen=True)
class AclEntry:
    """A single (permissions, principal) pair as the coordination protocol expects it."""
    perms: Perms
    identity: Identity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "perms": int(self.perms),
            "perm_names": self.perms.names(),
            "identity": self.identity.to_dict(),
        }


READ_ACL_UNSAFE: List[AclEntry] = [AclEntry(Perms.READ, ANYONE_ID_UNSAFE)]


class InvalidRulePattern(ValidationError):
    """An ACL rule pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            f"Invalid ACL rule pattern '{pattern}': {reason}",
            details={"pattern": pattern, "reason": reason},
            code="INVALID_RULE_PATTERN"
        )


@dataclass(frozen=True)
class AclRule:
    """Grants ``perms`` to ``identity`` on every path the pattern fully matches.

    The pattern is compiled when the rule is built, so a malformed expression
    is reported at configuration time rather than on first resolution.
    """
    pattern: str
    perms: Perms
    identity: Identity
    _regex: re.Pattern = field(init=False, repr=False, compare=False, hash=False)

    def __post_init__(self):
        try:
            regex = re.compile(self.pattern)
        except re.error as e:
            raise InvalidRulePattern(self.pattern, str(e)) from e
        object.__setattr__(self, "perms", Perms(self.perms))
        object.__setattr__(self, "_regex", regex)

    def matches(self, path: str) -> bool:
        """Full-string match of the pattern against a concrete path."""
        return self._regex.fullmatch(path) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern,
            "perms": int(self.perms),
            "perm_names": self.perms.names(),
            "identity": self.identity.to_dict(),
        }


class AclResolveRequest(BaseModel):
    """Request model for ACL resolution."""
    path: str = Field(..., min_length=1, description="Concrete coordination path")


class AclEntryResponse(BaseModel):
    """A resolved ACL entry."""
    perms: int = Field(..., description="Permission bitmask")
    perm_names: List[str] = Field(default_factory=list, description="Names of the granted bits")
    identity: Dict[str, str] = Field(..., description="Principal scheme and id")


class AclResolveResponse(BaseModel):
    """Response model for ACL resolution."""
    path: str
    acl: List[AclEntryResponse]
    default_applied: bool = Field(False, description="True when no rule matched the path")


class AclRuleResponse(BaseModel):
    """A configured ACL rule."""
    pattern: str
    perms: int
    perm_names: List[str]
    identity: Dict[str, str]
