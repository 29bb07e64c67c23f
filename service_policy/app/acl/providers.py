"""
The cluster ACL policy applied to coordination nodes as they are created.

Unauthenticated clients may read everything. Two credentialed roles exist:
masters get CREATE, READ, WRITE and DELETE on every node, agents get READ
everywhere plus only the write access they need on their own host subtrees
and on job history. Keeping agents narrow limits what a leaked agent
credential can do.

All agents share one credential, so an agent can modify data belonging to
another agent to the same extent as its own. Per-agent credentials would
need a different provider.
"""

from shared.logging import get_logger
from . import paths
from .models import ANYONE_ID_UNSAFE, Identity, Perms, READ_ACL_UNSAFE
from .resolver import RuleBasedAclResolver

PATH_COMPONENT_WILDCARD = "[^/]+"
DIGEST_SCHEME = "digest"
MASTER_USER = "helios-master"
AGENT_USER = "helios-agent"

logger = get_logger("policy.acl_providers")


def master_identity(master_digest: str) -> Identity:
    return Identity(DIGEST_SCHEME, f"{MASTER_USER}:{master_digest}")


def agent_identity(agent_digest: str) -> Identity:
    return Identity(DIGEST_SCHEME, f"{AGENT_USER}:{agent_digest}")


def default_acl_resolver(master_digest: str, agent_digest: str) -> RuleBasedAclResolver:
    """Build the resolver for the master and agent roles."""
    master_id = master_identity(master_digest)
    agent_id = agent_identity(agent_digest)
    host = PATH_COMPONENT_WILDCARD
    job = PATH_COMPONENT_WILDCARD

    resolver = (
        RuleBasedAclResolver.builder()
        # Never reached in practice since the catch-all rules below match every path
        .default_acl(READ_ACL_UNSAFE)
        .rule(".*", Perms.CRWD, master_id)
        .rule(".*", Perms.READ, agent_id)
        .rule(".*", Perms.READ, ANYONE_ID_UNSAFE)
        # Agents create /config/hosts/<host> and its children, and delete their
        # own subtree when re-registering after a reinstall. They only get READ
        # on /config/hosts/<host>/jobs so they can't deploy jobs to other hosts.
        .rule(paths.config_hosts(), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.config_host(host), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.config_host_id(host), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.config_host_ports(host), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.status_hosts(), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.status_host(host), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.status_host_jobs(host), Perms.CREATE | Perms.DELETE, agent_id)
        .rule(paths.status_host_job(host, job), Perms.WRITE, agent_id)
        .rule(paths.status_host_agent_info(host), Perms.WRITE, agent_id)
        .rule(paths.status_host_labels(host), Perms.WRITE, agent_id)
        .rule(paths.status_host_env_vars(host), Perms.WRITE, agent_id)
        .rule(paths.status_host_up(host), Perms.WRITE, agent_id)
        .rule(paths.history_jobs() + "(/.+)?", Perms.CREATE, agent_id)
        # Pruning old task history events
        .rule(paths.history_job_host_events(job, host), Perms.DELETE, agent_id)
        .build()
    )

    logger.info("Default ACL resolver built", rules=len(resolver.rules))
    return resolver
