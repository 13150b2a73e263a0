"""Server configuration.

ServerConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass

from roost.application import DEFAULT_ROUTING

# Name of the listener bound to ServerConfig.host / ServerConfig.port
DEFAULT_LISTENER = DEFAULT_ROUTING


@dataclass(frozen=True, slots=True)
class ListenerConfig:
    """An additional named listener (socket) on the server."""

    name: str
    host: str = "127.0.0.1"
    port: int = 0  # 0 = ephemeral port chosen by the OS


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Server configuration. Immutable after creation.

    All fields have sensible defaults. Add named listeners to give
    applications somewhere to bind their routing name::

        config = ServerConfig(
            port=8080,
            listeners=(ListenerConfig("admin", port=8081),),
        )
    """

    host: str = "127.0.0.1"
    port: int = 8080
    listeners: tuple[ListenerConfig, ...] = ()

    @property
    def listener_names(self) -> frozenset[str]:
        """Names of every listener, including the default one."""
        return frozenset({DEFAULT_LISTENER, *(lst.name for lst in self.listeners)})

    def listener(self, name: str) -> ListenerConfig | None:
        """Look up a listener by name. The default listener is synthesized."""
        if name == DEFAULT_LISTENER:
            return ListenerConfig(DEFAULT_LISTENER, self.host, self.port)
        for lst in self.listeners:
            if lst.name == name:
                return lst
        return None
