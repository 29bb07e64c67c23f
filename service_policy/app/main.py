"""
Policy service for coordination tree ACLs and host selectors.
"""

from typing import List, Optional

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ConfigurationError

from .acl.models import (
    AclEntryResponse, AclResolveRequest, AclResolveResponse, AclRuleResponse
)
from .acl.providers import default_acl_resolver
from .selectors.equivalence import are_logically_equal
from .selectors.models import (
    HostSelector, InvalidSelector,
    SelectorEquivalenceRequest, SelectorEquivalenceResponse,
    SelectorMatchRequest, SelectorMatchResponse,
    SelectorModel, SelectorParseRequest, SelectorParseResponse
)
from .selectors.parser import parse, parse_many

SERVICE_NAME = "policy"
SERVICE_PORT = 8014


class PolicyService(BaseService):
    """Policy service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config)

        if self.config.env != "local" and not (self.config.master_digest and self.config.agent_digest):
            raise ConfigurationError(
                "Master and agent digests are required outside local environments",
                details={"env": self.config.env}
            )

        self.acl_resolver = default_acl_resolver(self.config.master_digest, self.config.agent_digest)

        self._setup_policy_routes()

        self.logger.info(
            "Policy service initialized",
            env=self.config.env,
            acl_rules=len(self.acl_resolver.rules)
        )

    def _setup_policy_routes(self):
        """Set up policy-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Coordination Policy Service",
                "version": "1.0.0",
                "capabilities": ["acl_resolution", "host_selectors"]
            }

        @self.app.post("/acl/resolve", response_model=AclResolveResponse)
        async def resolve_acl(request: AclResolveRequest):
            """Resolve the ACL for a coordination path."""
            with self.metrics.time_operation("acl_resolution_duration_seconds"):
                effective = self.acl_resolver.resolve(request.path)
                acl = self.acl_resolver.get_acl_for_path(request.path)

            source = "rules" if effective else "default"
            self.metrics.increment_counter("acl_resolutions_total", source=source)

            return AclResolveResponse(
                path=request.path,
                acl=[AclEntryResponse(**entry.to_dict()) for entry in acl],
                default_applied=not effective
            )

        @self.app.get("/acl/rules", response_model=List[AclRuleResponse])
        async def get_acl_rules():
            """List the configured ACL rules in declaration order."""
            return [AclRuleResponse(**rule.to_dict()) for rule in self.acl_resolver.rules]

        @self.app.post("/selectors/parse", response_model=SelectorParseResponse)
        async def parse_selector(request: SelectorParseRequest):
            """Parse a host selector expression."""
            selector = parse(request.text)
            if selector is None:
                self.metrics.increment_counter("selector_parses_total", result="invalid")
                raise InvalidSelector(
                    f"Invalid host selector '{request.text}'",
                    details={"text": request.text}
                )

            self.metrics.increment_counter("selector_parses_total", result="ok")
            return SelectorParseResponse(
                selector=SelectorModel(**selector.to_dict()),
                pretty=selector.to_pretty_string()
            )

        @self.app.post("/selectors/match", response_model=SelectorMatchResponse)
        async def match_selector(request: SelectorMatchRequest):
            """Check a label value against a host selector."""
            selector = HostSelector.from_dict(request.selector.model_dump())
            return SelectorMatchResponse(matches=selector.matches(request.value))

        @self.app.post("/selectors/equivalence", response_model=SelectorEquivalenceResponse)
        async def selector_equivalence(request: SelectorEquivalenceRequest):
            """Check whether two sets of selector expressions are logically equal."""
            first = parse_many(request.first)
            second = parse_many(request.second)
            return SelectorEquivalenceResponse(logically_equal=are_logically_equal(first, second))


def create_app(config: Optional[ServiceConfig] = None):
    """Create policy service application."""
    service = PolicyService(config)
    return service.app


if __name__ == "__main__":
    service = PolicyService()
    service.run()
