#!/usr/bin/env python3
"""
Railway Container Restart Script
For every configured service, fetches the latest successful deployment from
Railway and restarts it via the Railway API. Failures are isolated per service;
the process exits non-zero if any service could not be restarted.
"""

import logging
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional

from railway_config import ConfigError, load_config
from railway_graphql import (
    RailwayAPIError,
    RailwayClient,
    get_latest_deployment,
    restart_deployment,
)

LOG_FORMAT = "%(asctime)s [RAILFLUSH] %(levelname)s: %(message)s"


@dataclass
class ServiceOutcome:
    service_id: str
    deployment_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


@dataclass
class RunResult:
    outcomes: List[ServiceOutcome] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def succeeded(self):
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self):
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def exit_code(self):
        return 1 if self.failed else 0


class _BelowWarning(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.WARNING


def configure_logging(level=logging.INFO):
    """Progress to stdout, warnings and failures to stderr."""
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowWarning())
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT,
                        handlers=[stdout_handler, stderr_handler])
    logging.getLogger().setLevel(level)


def restart_service(client, config, service_id) -> ServiceOutcome:
    """Fetch latest deployment ID for one service and restart it."""
    logging.info(f"Fetching latest deployment for service {service_id}")
    try:
        deployment_id = get_latest_deployment(
            client, config.project_id, config.environment_id, service_id)
    except RailwayAPIError as e:
        logging.error(f"Service {service_id}: {e}")
        return ServiceOutcome(service_id, error=str(e))

    logging.info(f"Restarting deployment {deployment_id} for service {service_id}")
    try:
        restart_deployment(client, deployment_id)
    except RailwayAPIError as e:
        logging.error(f"Service {service_id}: {e}")
        return ServiceOutcome(service_id, deployment_id, error=str(e))

    logging.info(f"Service {service_id} restarted successfully")
    return ServiceOutcome(service_id, deployment_id)


def restart_services(client, config, started_at=None) -> RunResult:
    """Restart every configured service, one at a time, in configured order."""
    if started_at is None:
        started_at = time.monotonic()

    result = RunResult()
    for service_id in config.service_ids:
        result.outcomes.append(restart_service(client, config, service_id))

    result.elapsed_ms = int((time.monotonic() - started_at) * 1000)
    logging.info(f"Done: {result.succeeded} restarted, {result.failed} failed ({result.elapsed_ms}ms)")
    return result


def main(environ=None, session=None) -> int:
    started_at = time.monotonic()
    configure_logging()
    logging.info("railflush: restarting Railway deployments")

    try:
        config = load_config(environ)
    except ConfigError as e:
        logging.error(f"Configuration error: {e}")
        return 1

    logging.getLogger().setLevel(config.log_level)
    logging.info(f"Targeting {len(config.service_ids)} service(s) in project {config.project_id}")

    with RailwayClient(config.api_token, config.api_url, session=session) as client:
        result = restart_services(client, config, started_at)

    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
