"""Utility functions and decorators."""

import logging.config
import sys
import structlog
import yaml
from pathlib import Path
from typing import Optional, Union
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential
from kubernetes.client.rest import ApiException


def _is_transient(error: BaseException) -> bool:
    """Server-side and throttling API errors are worth retrying."""
    if not isinstance(error, ApiException):
        return False
    return error.status is None or error.status == 429 or error.status >= 500


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 1.5,
    max_wait: float = 60.0
):
    """Decorator for retrying transient Kubernetes API errors with exponential backoff."""
    return retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=backoff_factor, max=max_wait),
        reraise=True
    )


def setup_logging(log_level: str = "INFO",
                  config_path: Optional[Union[str, Path]] = None,
                  json_logs: bool = False) -> None:
    """
    Configure stdlib logging and structlog for the CLI.

    Log records go to stderr so that ``--json`` report output on stdout stays
    parseable. A YAML ``dictConfig`` file, when given, replaces the default
    stderr handler. ``json_logs`` switches the console renderer for JSON lines.
    """
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            logging.config.dictConfig(yaml.safe_load(f))
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            stream=sys.stderr,
            format='%(message)s',
            force=True,
        )

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def parse_cpu_milli(cpu_str: Optional[str]) -> float:
    """Parse a Kubernetes CPU quantity ('4', '250m', '0.5') to millicores."""
    if not cpu_str:
        return 0.0

    cpu_str = str(cpu_str).strip()
    if cpu_str.endswith('m'):
        return float(cpu_str[:-1])
    if cpu_str.endswith('n'):
        return float(cpu_str[:-1]) / 1_000_000
    return float(cpu_str) * 1000


def parse_memory_mi(memory_str: Optional[str]) -> float:
    """Parse a Kubernetes memory quantity ('16Gi', '16393216Ki', '512M') to MiB."""
    if not memory_str:
        return 0.0

    memory_str = str(memory_str).strip()

    units = {
        'Ki': 1 / 1024,
        'Mi': 1,
        'Gi': 1024,
        'Ti': 1024**2,
        'k': 1000 / 1024**2,
        'K': 1000 / 1024**2,
        'M': 1000**2 / 1024**2,
        'G': 1000**3 / 1024**2,
        'T': 1000**4 / 1024**2,
    }

    for unit, multiplier in units.items():
        if memory_str.endswith(unit):
            return float(memory_str[:-len(unit)]) * multiplier

    # Plain bytes
    return float(memory_str) / 1024**2


def format_cpu(millicores: float) -> str:
    """Format millicores to human readable format."""
    if millicores >= 1000:
        return f"{millicores / 1000:.2f} cores"
    return f"{millicores:.0f}m"
