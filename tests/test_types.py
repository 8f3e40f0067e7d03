"""Tests for platform classification types."""

import pytest

from infra_sense.detection import types
from infra_sense.detection.types import ContainerPlatform, PlatformType, Runtime


class TestContainerPlatform:
    """Tests for the ContainerPlatform value type."""

    def test_exactly_eleven_platforms(self):
        """The closed set has 3 Kubernetes, 7 standalone and 1 host entry."""
        assert len(types.ALL_PLATFORMS) == 11
        assert len(set(types.ALL_PLATFORMS)) == 11
        by_type = [p.type for p in types.ALL_PLATFORMS]
        assert by_type.count(PlatformType.KUBERNETES) == 3
        assert by_type.count(PlatformType.STANDALONE) == 7
        assert by_type.count(PlatformType.HOST) == 1

    def test_display_names(self):
        """Display names come from the fixed table."""
        assert types.KUBERNETES_CRIO.display_name == "Kubernetes (CRI-O)"
        assert types.KUBERNETES_OTHER.display_name == "Kubernetes (other)"
        assert types.LXC.display_name == "LXC/LXD"
        assert types.HOST.display_name == "Host (no recognized container)"
        assert str(types.DOCKER) == "Docker"

    def test_same_pair_is_equal(self):
        """Constructing a known pair yields an equal value with the same label."""
        platform = ContainerPlatform(PlatformType.STANDALONE, Runtime.PODMAN)
        assert platform == types.PODMAN
        assert platform.display_name == types.PODMAN.display_name

    def test_accepts_string_values(self):
        """Raw enum values are coerced."""
        platform = ContainerPlatform("kubernetes", "crio")
        assert platform == types.KUBERNETES_CRIO
        assert platform.type is PlatformType.KUBERNETES

    @pytest.mark.parametrize(
        "platform_type,runtime",
        [
            (PlatformType.HOST, Runtime.DOCKER),
            (PlatformType.STANDALONE, Runtime.NONE),
            (PlatformType.STANDALONE, Runtime.OTHER),
            (PlatformType.KUBERNETES, Runtime.PODMAN),
            (PlatformType.KUBERNETES, Runtime.NONE),
        ],
    )
    def test_invalid_pairs_rejected(self, platform_type, runtime):
        """Pairings outside the table cannot be constructed."""
        with pytest.raises(ValueError, match="Invalid platform combination"):
            ContainerPlatform(platform_type, runtime)

    def test_unknown_runtime_rejected(self):
        """Unknown runtime names are rejected."""
        with pytest.raises(ValueError):
            ContainerPlatform("standalone", "firecracker")

    def test_immutable(self):
        """Platforms are frozen."""
        with pytest.raises(AttributeError):
            types.DOCKER.runtime = Runtime.PODMAN

    def test_to_dict(self):
        """to_dict exposes plain strings."""
        assert types.SYSTEMD_NSPAWN.to_dict() == {
            "type": "standalone",
            "runtime": "systemd-nspawn",
            "display_name": "systemd-nspawn",
        }

    def test_in_container(self):
        """Only HOST is outside a container."""
        assert types.HOST.in_container is False
        assert types.KUBERNETES_OTHER.in_container is True
        assert types.RKT.in_container is True
