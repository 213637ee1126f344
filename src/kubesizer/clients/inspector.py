"""Async port for observing a live cluster."""

from abc import ABC, abstractmethod
from typing import List, Optional
import structlog

from kubesizer.models.cluster_models import ClusterSnapshot, HpaStatus, NodeCapacity

logger = structlog.get_logger(__name__)


class ClusterInspector(ABC):
    """
    Supplies observed values a caller can merge into a SizingInput.

    Used as an async context manager: ``connect`` runs on entry and
    ``disconnect`` on exit, even when the body raises.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self._connected = False
        self.logger = logger.bind(inspector=self.name)

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection to the cluster."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the connection."""

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    @abstractmethod
    async def current_pods(self, namespace: Optional[str] = None) -> int:
        """Number of pods in the cluster (optionally in one namespace)."""

    @abstractmethod
    async def node_capacity(self) -> NodeCapacity:
        """Allocatable capacity of the smallest ready node."""

    @abstractmethod
    async def cluster_snapshot(self, namespace: Optional[str] = None) -> ClusterSnapshot:
        pass

    @abstractmethod
    async def hpa_statuses(self, namespace_filter: str = "", name_filter: str = "") -> List[HpaStatus]:
        """HPAs whose namespace and name contain the given (case-insensitive) filters."""
