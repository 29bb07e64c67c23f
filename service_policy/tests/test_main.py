"""
Unit tests for Policy main service.
"""

from typing import Optional, get_type_hints

import pytest
from fastapi.testclient import TestClient

from service_policy.app.acl.providers import agent_identity, master_identity
from service_policy.app.main import PolicyService, create_app
from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import ConfigurationError


MASTER_DIGEST = "m-digest"
AGENT_DIGEST = "a-digest"


@pytest.fixture
def config():
    """Local service configuration with role digests."""
    return get_config(
        "policy", 8014,
        env="local",
        master_digest=MASTER_DIGEST,
        agent_digest=AGENT_DIGEST,
        enable_metrics=True,
    )


class TestPolicyService:
    """Test cases for PolicyService."""

    @pytest.fixture
    def policy_service(self, config):
        """Create PolicyService instance."""
        return PolicyService(config)

    @pytest.fixture
    def client(self, policy_service):
        """Create test client."""
        return TestClient(policy_service.app)

    def test_service_initialization(self, policy_service):
        """Test service initialization."""
        assert policy_service.service_name == "policy"
        assert policy_service.port == 8014
        assert len(policy_service.acl_resolver.rules) == 17

    def test_missing_digests_outside_local(self):
        """Non-local environments require both digests."""
        with pytest.raises(ConfigurationError):
            PolicyService(get_config("policy", 8014, env="production", master_digest="m", agent_digest=""))

    def test_config_is_optional(self, monkeypatch):
        """Without an explicit config the service loads the default one."""
        monkeypatch.delenv("POLICY_ENV", raising=False)

        assert get_type_hints(BaseService.__init__)["config"] == Optional[ServiceConfig]

        service = PolicyService()
        assert service.config.service_name == "policy"
        assert service.config.port == 8014

    def test_create_app(self, config):
        """create_app returns a FastAPI application."""
        app = create_app(config)
        assert app.title == "Policy Service"

    def test_root_endpoint(self, client):
        """Test root endpoint."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "policy"
        assert "acl_resolution" in data["capabilities"]
        assert "host_selectors" in data["capabilities"]

    def test_health_endpoint(self, client):
        """Test health endpoint."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "policy"
        assert data["status"] == "ok"
        assert data["dependencies"] == {}

    def test_request_id_echoed(self, client):
        """The request ID header is returned to the caller."""
        response = client.get("/", headers={"X-Request-ID": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"

    def test_resolve_acl(self, client):
        """Resolving an agent-writable path lists all three principals."""
        response = client.post("/acl/resolve", json={"path": "/status/hosts/h1/up"})
        assert response.status_code == 200
        data = response.json()

        assert data["path"] == "/status/hosts/h1/up"
        assert data["default_applied"] is False
        assert data["acl"] == [
            {"perms": 15, "perm_names": ["READ", "WRITE", "CREATE", "DELETE"],
             "identity": master_identity(MASTER_DIGEST).to_dict()},
            {"perms": 3, "perm_names": ["READ", "WRITE"],
             "identity": agent_identity(AGENT_DIGEST).to_dict()},
            {"perms": 1, "perm_names": ["READ"],
             "identity": {"scheme": "world", "id": "anyone"}},
        ]

    def test_resolve_acl_requires_path(self, client):
        """An empty path is rejected by request validation."""
        response = client.post("/acl/resolve", json={"path": ""})
        assert response.status_code == 422

    def test_get_acl_rules(self, client):
        """Rules are listed in declaration order."""
        response = client.get("/acl/rules")
        assert response.status_code == 200
        rules = response.json()

        assert len(rules) == 17
        assert rules[0]["pattern"] == ".*"
        assert rules[0]["perms"] == 15
        assert rules[-1]["pattern"] == "/history/jobs/[^/]+/hosts/[^/]+/events"

    def test_parse_selector(self, client):
        """Parsing returns the serialized selector and pretty form."""
        response = client.post("/selectors/parse", json={"text": "role in (db, cache, db)"})
        assert response.status_code == 200
        data = response.json()

        assert data["selector"] == {"label": "role", "operator": "in", "operand": ["db", "cache"]}
        assert data["pretty"] == "role in (db, cache)"

    def test_parse_invalid_selector(self, client):
        """Text that is not a selector is a 422 with a typed error body."""
        response = client.post("/selectors/parse", json={"text": "role >= 3"})
        assert response.status_code == 422
        data = response.json()

        assert data["code"] == "INVALID_SELECTOR"
        assert data["details"] == {"text": "role >= 3"}

    @pytest.mark.parametrize("selector, value, expected", [
        ({"label": "site", "operator": "=", "operand": "ash"}, "ash", True),
        ({"label": "site", "operator": "!=", "operand": "ash"}, None, True),
        ({"label": "site", "operator": "in", "operand": ["ash", "lon"]}, "lon", True),
        ({"label": "site", "operator": "notin", "operand": ["ash"]}, "ash", False),
    ])
    def test_match_selector(self, client, selector, value, expected):
        """Matching evaluates the selector against the value."""
        response = client.post("/selectors/match", json={"selector": selector, "value": value})
        assert response.status_code == 200
        assert response.json() == {"matches": expected}

    def test_match_unknown_operator(self, client):
        """Unknown operators are rejected with a typed error."""
        response = client.post(
            "/selectors/match",
            json={"selector": {"label": "site", "operator": "~", "operand": "ash"}, "value": "ash"}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "UNKNOWN_OPERATOR"

    def test_match_wrong_operand_shape(self, client):
        """IN with a string operand is invalid."""
        response = client.post(
            "/selectors/match",
            json={"selector": {"label": "site", "operator": "in", "operand": "ash"}, "value": "ash"}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_SELECTOR"

    def test_selector_equivalence(self, client):
        """Equivalence compares both sets of expressions."""
        response = client.post(
            "/selectors/equivalence",
            json={"first": ["site = ash", "role in (db)"], "second": ["role = db", "site in (ash)"]}
        )
        assert response.status_code == 200
        assert response.json() == {"logically_equal": True}

    def test_selector_equivalence_negated_forms(self, client):
        """'!=' and singleton 'notin' are not reported as equivalent."""
        response = client.post(
            "/selectors/equivalence",
            json={"first": ["site != ash"], "second": ["site notin (ash)"]}
        )
        assert response.json() == {"logically_equal": False}

    def test_selector_equivalence_invalid_text(self, client):
        """Invalid expressions are rejected."""
        response = client.post("/selectors/equivalence", json={"first": ["nope"], "second": []})
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_SELECTOR"

    def test_metrics_endpoint(self, client):
        """Policy metrics are exported."""
        client.post("/acl/resolve", json={"path": "/config/hosts"})
        client.post("/selectors/parse", json={"text": "a = b"})

        response = client.get("/metrics")
        assert response.status_code == 200
        body = response.text
        assert 'acl_resolutions_total{source="rules"} 1.0' in body
        assert 'selector_parses_total{result="ok"} 1.0' in body
