"""Shared fixtures and in-memory collaborators for abctl_local tests."""

from __future__ import annotations

import dataclasses

import pytest

from abctl_local.cluster import ClusterHandle, Provider, ProviderName
from abctl_local.config import InstallOptions, RegistryCredentials
from abctl_local.errors import LocalInstallError, PortIntrospectionError
from abctl_local.mounts import VolumeMount
from abctl_local.runtime import RuntimeVersion
from abctl_local.telemetry import LoggingTelemetry


@pytest.fixture(autouse=True)
def _clean_abctl_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer ABCTL_* variables out of the tests."""
    for rule in RegistryCredentials.override_rules():
        monkeypatch.delenv(rule.env_var, raising=False)
    for name in ("ABCTL_CLUSTER_NAME", "ABCTL_PROVIDER", "ABCTL_COMMAND_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@dataclasses.dataclass
class FakeRuntime:
    """Runtime client returning a fixed port, or failing introspection."""

    port: int | None = None
    version_error: LocalInstallError | None = None
    inspected: list[str] = dataclasses.field(default_factory=list)

    def version(self) -> RuntimeVersion:
        if self.version_error is not None:
            raise self.version_error
        return RuntimeVersion(version="27.0.3", arch="arm64", platform="linux")

    def exposed_port(self, container: str) -> int:
        self.inspected.append(container)
        if self.port is None:
            raise PortIntrospectionError(f"unable to inspect container {container}")
        return self.port


@dataclasses.dataclass
class FakeClusterManager:
    """Cluster manager recording creation requests."""

    exists: bool = False
    lookup_error: LocalInstallError | None = None
    create_error: LocalInstallError | None = None
    created: list[tuple[str, int, list[VolumeMount]]] = dataclasses.field(default_factory=list)

    def lookup(self, provider: Provider) -> ClusterHandle:
        if self.lookup_error is not None:
            raise self.lookup_error
        return ClusterHandle(name=provider.cluster_name, exists=self.exists, provider=provider)

    def create(self, provider: Provider, port: int, mounts: list[VolumeMount]) -> None:
        self.created.append((provider.cluster_name, port, mounts))
        if self.create_error is not None:
            raise self.create_error


@dataclasses.dataclass
class FakeInstaller:
    """Installer recording the options it receives."""

    error: LocalInstallError | None = None
    installed: list[InstallOptions] = dataclasses.field(default_factory=list)

    def install(self, options: InstallOptions) -> None:
        self.installed.append(options)
        if self.error is not None:
            raise self.error


@dataclasses.dataclass
class PortCheckRecorder:
    """Port availability check that records calls and optionally fails."""

    error: LocalInstallError | None = None
    checked: list[int] = dataclasses.field(default_factory=list)

    def __call__(self, port: int) -> None:
        self.checked.append(port)
        if self.error is not None:
            raise self.error


@pytest.fixture
def kind_provider() -> Provider:
    """Provider for the default kind cluster."""
    return Provider(name=ProviderName.KIND, cluster_name="airbyte-abctl")


@pytest.fixture
def test_provider() -> Provider:
    """Provider without port introspection."""
    return Provider(name=ProviderName.TEST, cluster_name="test-airbyte-abctl")


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def clusters() -> FakeClusterManager:
    return FakeClusterManager()


@pytest.fixture
def installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def port_check() -> PortCheckRecorder:
    return PortCheckRecorder()


@pytest.fixture
def telemetry() -> LoggingTelemetry:
    return LoggingTelemetry()
