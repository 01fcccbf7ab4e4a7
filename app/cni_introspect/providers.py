"""
Snapshot providers.

A snapshot provider is any zero-argument callable returning the current
state as a JSON-serializable value. Providers must be safe to call from
several request threads at once; the server never locks around them.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable

from cni_introspect import envsettings


SnapshotProvider = Callable[[], Any]


class SnapshotStore:
    """
    Holds the latest snapshot published by the owning process.

    The owner calls `set()` whenever its state changes; `get` is a valid
    SnapshotProvider.
    """

    def __init__(self, initial: Any = None):
        self._lock = threading.Lock()
        self._value = {} if initial is None else initial

    def set(self, value: Any) -> None:
        """Replace the published snapshot."""
        with self._lock:
            self._value = value

    def get(self) -> Any:
        """Return the published snapshot."""
        with self._lock:
            return self._value


@dataclass(frozen=True)
class SnapshotProviders:
    """
    The five providers served by the introspection endpoint.

    Attributes:
        enis: ENI inventory from the IP address datastore
        pods: Pod to IP address bindings
        networkutils_env_settings: Host networking configuration
        ipamd_env_settings: IP address management configuration
        eni_configs: ENI configuration keyed by node label
    """

    enis: SnapshotProvider
    pods: SnapshotProvider
    networkutils_env_settings: SnapshotProvider
    ipamd_env_settings: SnapshotProvider
    eni_configs: SnapshotProvider


@dataclass
class StandaloneProviders:
    """Providers for running the server without an embedding daemon."""

    enis: SnapshotStore
    pods: SnapshotStore
    eni_configs: SnapshotStore

    def bundle(self) -> SnapshotProviders:
        return SnapshotProviders(
            enis=self.enis.get,
            pods=self.pods.get,
            networkutils_env_settings=envsettings.networkutils_env_settings,
            ipamd_env_settings=envsettings.ipamd_env_settings,
            eni_configs=self.eni_configs.get,
        )


def standalone_providers() -> StandaloneProviders:
    """Create empty stores for the datastore-backed snapshots."""
    return StandaloneProviders(
        enis=SnapshotStore(),
        pods=SnapshotStore(),
        eni_configs=SnapshotStore(),
    )
