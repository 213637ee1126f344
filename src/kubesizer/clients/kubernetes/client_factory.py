# src/kubesizer/clients/kubernetes/client_factory.py
"""Kubernetes client factory."""

from typing import Dict, Any, Optional
import structlog

from kubesizer.core.exceptions import ConfigurationException
from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class KubernetesClientFactory:
    """Factory for creating Kubernetes clients from settings."""

    def __init__(self, config: Dict[str, Any]):
        self.kubeconfig_path = config.get("kubeconfig_path")
        self.context = config.get("context")

        self.logger = logger.bind(factory="kubernetes")

    def create_client(self, kubeconfig_data: Optional[bytes] = None) -> KubernetesClient:
        if kubeconfig_data is not None and not kubeconfig_data.strip():
            raise ConfigurationException("Provided kubeconfig data is empty")

        self.logger.debug(
            "Creating Kubernetes client",
            kubeconfig_path=self.kubeconfig_path,
            context=self.context,
            inline_kubeconfig=kubeconfig_data is not None,
        )
        return KubernetesClient(
            kubeconfig_path=self.kubeconfig_path,
            context=self.context,
            kubeconfig_data=kubeconfig_data
        )
