"""
Coordination tree path layout.

Components are inserted verbatim, so callers may pass regular expression
fragments (e.g. ``[^/]+``) to build ACL rule patterns.
"""

CONFIG = "/config"
STATUS = "/status"
HISTORY = "/history"
HOSTS = "hosts"
JOBS = "jobs"


def _join(*parts: str) -> str:
    return "/".join(parts)


def config_hosts() -> str:
    return _join(CONFIG, HOSTS)


def config_host(host: str) -> str:
    return _join(config_hosts(), host)


def config_host_id(host: str) -> str:
    return _join(config_host(host), "id")


def config_host_ports(host: str) -> str:
    return _join(config_host(host), "ports")


def config_host_jobs(host: str) -> str:
    return _join(config_host(host), JOBS)


def status_hosts() -> str:
    return _join(STATUS, HOSTS)


def status_host(host: str) -> str:
    return _join(status_hosts(), host)


def status_host_jobs(host: str) -> str:
    return _join(status_host(host), JOBS)


def status_host_job(host: str, job: str) -> str:
    return _join(status_host_jobs(host), job)


def status_host_agent_info(host: str) -> str:
    return _join(status_host(host), "agentinfo")


def status_host_labels(host: str) -> str:
    return _join(status_host(host), "labels")


def status_host_env_vars(host: str) -> str:
    return _join(status_host(host), "environment")


def status_host_up(host: str) -> str:
    return _join(status_host(host), "up")


def history_jobs() -> str:
    return _join(HISTORY, JOBS)


def history_job(job: str) -> str:
    return _join(history_jobs(), job)


def history_job_host_events(job: str, host: str) -> str:
    return _join(history_job(job), HOSTS, host, "events")
