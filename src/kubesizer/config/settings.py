# config/settings.py
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from enum import Enum
from dotenv import load_dotenv

from kubesizer.models.sizing_models import PodSpec, SizingPolicy

# Load .env file explicitly
load_dotenv()


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class KubernetesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="K8S_")

    kubeconfig_path: Optional[str] = Field(None, description="Path to kubeconfig file")
    namespace: Optional[str] = Field(None, description="Namespace filter for the HPA listing")
    context: Optional[str] = Field(None, description="Kubernetes context to use")


class PodSpecSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="POD_")

    cpu_request_milli: int = Field(100, description="Pod CPU request (m)")
    cpu_limit_milli: int = Field(1000, description="Pod CPU limit (m)")
    memory_request_mi: int = Field(2000, description="Pod memory request (Mi)")
    memory_limit_mi: int = Field(4000, description="Pod memory limit (Mi)")
    istio_cpu_request_milli: int = Field(150, description="Istio sidecar CPU request (m)")
    istio_cpu_limit_milli: int = Field(100, description="Istio sidecar CPU limit (m)")
    istio_memory_request_mi: int = Field(0, description="Istio sidecar memory request (Mi)")
    istio_memory_limit_mi: int = Field(0, description="Istio sidecar memory limit (Mi)")


class PolicySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SIZING_")

    hpa_min_floor: int = Field(0, description="HPA min replicas floor (0 = none)")
    hpa_max_cap: Optional[int] = Field(None, description="HPA max replicas cap")
    cpu_buffer_factor: float = Field(1.3, description="Buffer applied to requested cores")
    cpu_trigger_percent: int = Field(60, description="HPA CPU utilization target")
    cost_low_per_core: float = Field(107.0, description="Low $/core/month")
    cost_high_per_core: float = Field(285.0, description="High $/core/month")
    tps_per_pod: float = Field(400.0, description="Default tested TPS per pod")
    hpa_burst_factor: float = Field(2.0, description="Default HPA burst factor")
    node_cpu_capacity_milli: int = Field(4000, description="Default node CPU capacity (m)")
    node_mem_capacity_mi: int = Field(16384, description="Default node memory capacity (Mi)")
    istio_enabled: bool = Field(True, description="Add Istio sidecar overhead by default")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    environment: Environment = Field(Environment.DEVELOPMENT, description="Environment")
    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_config_path: Optional[str] = Field(None, description="YAML logging config")
    log_json: bool = Field(False, description="Render log lines as JSON")

    kubernetes: KubernetesSettings = Field(default_factory=lambda: KubernetesSettings())
    pod: PodSpecSettings = Field(default_factory=lambda: PodSpecSettings())
    sizing: PolicySettings = Field(default_factory=lambda: PolicySettings())

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()

    def pod_spec(self) -> PodSpec:
        return PodSpec(**self.pod.model_dump())

    def policy(self, production: bool = False) -> SizingPolicy:
        """
        Sizing policy from settings.

        ``production`` (or ``ENVIRONMENT=production``) applies the floor 3 /
        cap 64 standard to whichever of the two the environment leaves unset.
        """
        values = self.sizing.model_dump(
            include={
                "hpa_min_floor",
                "hpa_max_cap",
                "cpu_buffer_factor",
                "cpu_trigger_percent",
                "cost_low_per_core",
                "cost_high_per_core",
            }
        )
        if production or self.environment == Environment.PRODUCTION:
            explicit = self.sizing.model_fields_set
            return SizingPolicy.production(
                **{k: v for k, v in values.items() if k not in ("hpa_min_floor", "hpa_max_cap") or k in explicit}
            )
        return SizingPolicy(**values)
