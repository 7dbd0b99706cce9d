"""Deployment configuration dataclasses."""

from dataclasses import dataclass, field

DEFAULT_REGION = "eu-west-1"


@dataclass
class BuildConfig:
    """Where the handler source lives and where the bundle is written."""

    source_dir: str = "app"
    requirements: str = "requirements.txt"
    dist_dir: str = "dist"
    artifact_name: str = "handler.zip"


@dataclass
class ProbeConfig:
    """Health probe tuning. Not part of the version fingerprint."""

    retries: int = 5
    connect_timeout: float = 2.0
    timeout: float = 5.0


@dataclass
class DeployConfig:
    """Complete, resolved deployment configuration."""

    region: str = DEFAULT_REGION
    service_name: str = "versioned-fn"
    role_name: str = "versioned-fn-lambda-role"
    gateway_name: str = "versioned-fn-gateway"
    stage_name: str = "staging"
    memory_size: int = 256
    timeout: int = 10
    handler: str = "app.handler"
    runtime: str = "python3.12"
    environment: dict[str, str] = field(default_factory=dict)
    secrets: list[str] = field(default_factory=list)
    external_dependencies: list[str] = field(default_factory=list)
    function_wait_timeout: int = 30
    build: BuildConfig = field(default_factory=BuildConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    resolved_secrets: dict[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, d: dict) -> "DeployConfig":
        """Build a DeployConfig from a parsed YAML mapping. Missing keys keep their defaults."""
        defaults = cls()
        build_dict = d.get("build") or {}
        probe_dict = d.get("probe") or {}
        return cls(
            region=d.get("region", defaults.region),
            service_name=d.get("service_name", defaults.service_name),
            role_name=d.get("role_name", defaults.role_name),
            gateway_name=d.get("gateway_name", defaults.gateway_name),
            stage_name=d.get("stage_name", defaults.stage_name),
            memory_size=int(d.get("memory_size", defaults.memory_size)),
            timeout=int(d.get("timeout", defaults.timeout)),
            handler=d.get("handler", defaults.handler),
            runtime=d.get("runtime", defaults.runtime),
            environment={k: str(v) for k, v in (d.get("environment") or {}).items()},
            secrets=list(d.get("secrets") or []),
            external_dependencies=list(d.get("external_dependencies") or []),
            function_wait_timeout=int(d.get("function_wait_timeout", defaults.function_wait_timeout)),
            build=BuildConfig(**build_dict),
            probe=ProbeConfig(**probe_dict),
        )

    def function_environment(self) -> dict[str, str]:
        """Environment variables set on the deployed function."""
        env = dict(self.environment)
        env.update(self.resolved_secrets)
        return env

    def fingerprint(self) -> dict:
        """Serializable snapshot of everything that should trigger a redeploy when changed.

        Local paths and probe tuning are excluded: they do not change what runs remotely.
        """
        return {
            "region": self.region,
            "service_name": self.service_name,
            "role_name": self.role_name,
            "gateway_name": self.gateway_name,
            "stage_name": self.stage_name,
            "memory_size": self.memory_size,
            "timeout": self.timeout,
            "handler": self.handler,
            "runtime": self.runtime,
            "environment": dict(sorted(self.environment.items())),
            "secrets": dict(sorted(self.resolved_secrets.items())),
            "external_dependencies": sorted(self.external_dependencies),
        }
