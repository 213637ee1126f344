from .settings import Settings, KubernetesSettings, PodSpecSettings, PolicySettings

__all__ = ["Settings", "KubernetesSettings", "PodSpecSettings", "PolicySettings"]
