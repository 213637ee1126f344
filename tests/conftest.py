from typing import List, Optional

import pytest

from kubesizer.clients.inspector import ClusterInspector
from kubesizer.models.cluster_models import ClusterSnapshot, HpaStatus, NodeCapacity
from kubesizer.models.sizing_models import SizingInput


class FakeInspector(ClusterInspector):
    """In-memory ClusterInspector used in place of a live cluster."""

    def __init__(self, snapshot: ClusterSnapshot, hpas: Optional[List[HpaStatus]] = None):
        super().__init__("FakeInspector")
        self.snapshot = snapshot
        self.hpas = hpas or []
        self.connect_calls = 0
        self.snapshot_namespaces = []

    async def connect(self):
        self.connect_calls += 1
        self._connected = True

    async def disconnect(self):
        self._connected = False

    async def current_pods(self, namespace=None):
        return self.snapshot.running_pods

    async def node_capacity(self):
        return min(self.snapshot.nodes, key=lambda n: n.cpu_milli)

    async def cluster_snapshot(self, namespace=None):
        self.snapshot_namespaces.append(namespace)
        return self.snapshot

    async def hpa_statuses(self, namespace_filter="", name_filter=""):
        return [
            h for h in self.hpas
            if namespace_filter.lower() in h.namespace.lower() and name_filter.lower() in h.name.lower()
        ]


@pytest.fixture
def direct_input():
    """1000 TPS forecast against 400 TPS pods with 2 pods running."""
    return SizingInput(additional_tps=1000, tps_per_pod=400, current_pods=2)


@pytest.fixture
def snapshot():
    nodes = [
        NodeCapacity(name="node-a", cpu_milli=4000, memory_mi=16384, max_pods=110),
        NodeCapacity(name="node-b", cpu_milli=4000, memory_mi=16384, max_pods=110),
    ]
    return ClusterSnapshot(nodes=nodes, running_pods=200)


@pytest.fixture
def fake_inspector(snapshot):
    hpas = [
        HpaStatus(namespace="payments", name="payments-api", min_replicas=3, max_replicas=6,
                  current_replicas=3, cpu_current_percent=42),
        HpaStatus(namespace="orders", name="orders-worker", min_replicas=1, max_replicas=4),
    ]
    return FakeInspector(snapshot, hpas)
