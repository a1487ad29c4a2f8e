"""Unit tests for the create-or-reuse cluster provisioner."""

from __future__ import annotations

import pytest

from abctl_local.cluster import Provider
from abctl_local.errors import (
    IndeterminateStateError,
    PortUnavailableError,
    ResourceCreationError,
    ValidationError,
)
from abctl_local.mounts import VolumeMount
from abctl_local.provisioner import ClusterProvisioner, ProvisionState
from tests.conftest import FakeClusterManager, FakeRuntime, PortCheckRecorder


def _provisioner(
    provider: Provider,
    clusters: FakeClusterManager,
    runtime: FakeRuntime | None = None,
    port_check: PortCheckRecorder | None = None,
) -> ClusterProvisioner:
    return ClusterProvisioner(provider, clusters, runtime or FakeRuntime(), port_check or PortCheckRecorder())


class TestExistingCluster:
    """Tests for the reuse path."""

    def test_matching_port_is_validated(self, kind_provider: Provider) -> None:
        """Should validate an existing cluster using the same port."""
        outcome = _provisioner(kind_provider, FakeClusterManager(exists=True), FakeRuntime(port=8000)).provision(8000)

        assert outcome.state is ProvisionState.VALIDATED
        assert outcome.port == 8000
        assert outcome.port_resolution.warning is None

    def test_existing_port_wins(self, kind_provider: Provider) -> None:
        """Should continue with the existing cluster's port."""
        outcome = _provisioner(kind_provider, FakeClusterManager(exists=True), FakeRuntime(port=8001)).provision(8000)

        assert outcome.state is ProvisionState.VALIDATED
        assert outcome.port == 8001
        assert outcome.port_resolution.conflict is True

    def test_introspection_failure_continues_with_requested_port(self, kind_provider: Provider) -> None:
        """Should downgrade introspection failure to a warning."""
        outcome = _provisioner(kind_provider, FakeClusterManager(exists=True), FakeRuntime(port=None)).provision(8000)

        assert outcome.ok
        assert outcome.port == 8000
        assert outcome.port_resolution.determinable is False

    def test_no_creation_port_check_or_mount_parsing(self, kind_provider: Provider) -> None:
        """Should not create, check the port, or parse mounts when reusing."""
        clusters = FakeClusterManager(exists=True)
        port_check = PortCheckRecorder()

        outcome = _provisioner(kind_provider, clusters, FakeRuntime(port=8000), port_check).provision(
            8000, ["badformat"]
        )

        assert outcome.state is ProvisionState.VALIDATED
        assert clusters.created == []
        assert port_check.checked == []

    def test_provider_without_introspection_skips_port_check(self, test_provider: Provider) -> None:
        """Should keep the requested port for providers without introspection."""
        runtime = FakeRuntime(port=9999)

        outcome = _provisioner(test_provider, FakeClusterManager(exists=True), runtime).provision(8000)

        assert outcome.port == 8000
        assert outcome.port_resolution is None
        assert runtime.inspected == []


class TestNewCluster:
    """Tests for the creation path."""

    def test_creates_with_port_and_mounts(self, kind_provider: Provider) -> None:
        """Should create the cluster with the requested port and parsed mounts."""
        clusters = FakeClusterManager(exists=False)

        outcome = _provisioner(kind_provider, clusters).provision(9000, ["/data:/var/data"])

        assert outcome.state is ProvisionState.CREATED
        assert outcome.port == 9000
        assert clusters.created == [
            ("airbyte-abctl", 9000, [VolumeMount(host_path="/data", container_path="/var/data")]),
        ]

    def test_malformed_mount_aborts_before_creation(self, kind_provider: Provider) -> None:
        """Should abort with a ValidationError and never call create."""
        clusters = FakeClusterManager(exists=False)

        outcome = _provisioner(kind_provider, clusters).provision(8000, ["/host/a:/guest/a", "badformat"])

        assert outcome.state is ProvisionState.ABORTED
        assert isinstance(outcome.reason, ValidationError)
        assert "badformat" in str(outcome.reason)
        assert clusters.created == []

    def test_port_checked_before_creation(self, kind_provider: Provider) -> None:
        """Should abort when the port is taken and a cluster would be created."""
        clusters = FakeClusterManager(exists=False)
        port_check = PortCheckRecorder(error=PortUnavailableError("port 8000 is not available"))

        outcome = _provisioner(kind_provider, clusters, port_check=port_check).provision(8000)

        assert outcome.state is ProvisionState.ABORTED
        assert isinstance(outcome.reason, PortUnavailableError)
        assert port_check.checked == [8000]
        assert clusters.created == []

    def test_malformed_mount_reported_before_port_check(self, kind_provider: Provider) -> None:
        """Should name the bad volume spec even when the port is also taken."""
        clusters = FakeClusterManager(exists=False)
        port_check = PortCheckRecorder(error=PortUnavailableError("port 8000 is not available"))

        outcome = _provisioner(kind_provider, clusters, port_check=port_check).provision(8000, ["badformat"])

        assert isinstance(outcome.reason, ValidationError)
        assert "badformat" in str(outcome.reason)
        assert port_check.checked == []
        assert clusters.created == []

    def test_creation_failure_is_reported_once(self, kind_provider: Provider) -> None:
        """Should abort with the creation error after a single attempt."""
        error = ResourceCreationError("kind create cluster failed")
        clusters = FakeClusterManager(exists=False, create_error=error)

        outcome = _provisioner(kind_provider, clusters).provision(8000)

        assert outcome.state is ProvisionState.ABORTED
        assert outcome.reason is error
        assert outcome.reason.stage == "cluster creation"
        assert len(clusters.created) == 1


class TestLookupFailure:
    """Tests for an indeterminate existence query."""

    def test_aborts_without_mutation(self, kind_provider: Provider) -> None:
        """Should abort and never attempt creation."""
        error = IndeterminateStateError("kind get clusters failed")
        clusters = FakeClusterManager(lookup_error=error)
        port_check = PortCheckRecorder()

        outcome = _provisioner(kind_provider, clusters, port_check=port_check).provision(8000, ["/a:/b"])

        assert outcome.state is ProvisionState.ABORTED
        assert outcome.reason is error
        assert clusters.created == []
        assert port_check.checked == []

    def test_raise_for_abort_reraises_original(self, kind_provider: Provider) -> None:
        """Should re-raise the very same exception object."""
        error = IndeterminateStateError("kind get clusters failed")
        outcome = _provisioner(kind_provider, FakeClusterManager(lookup_error=error)).provision(8000)

        with pytest.raises(IndeterminateStateError) as excinfo:
            outcome.raise_for_abort()

        assert excinfo.value is error
