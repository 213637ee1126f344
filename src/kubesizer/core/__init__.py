from .exceptions import *
from .utils import *

__all__ = [
    "KubeSizerException",
    "InvalidInput",
    "DiscoveryException",
    "ClientConnectionException",
    "ConfigurationException",
    "retry_with_backoff",
    "setup_logging",
    "parse_cpu_milli",
    "parse_memory_mi",
    "format_cpu",
]
