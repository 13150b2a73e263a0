"""Server assembly: resolves application registrations to mounts.

The builder collects registrations during setup. ``build()`` decides,
for each one, which listener it lives on and which executor it uses,
then freezes every descriptor. Serving requests is not done here.
"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass, replace

from roost.application import DEFAULT_ROUTING, Application
from roost.config import DEFAULT_LISTENER, ServerConfig
from roost.errors import ConfigurationError
from roost.registration import ApplicationRegistration
from roost.resources import ResourceConfig

logger = logging.getLogger("roost.server")


@dataclass(frozen=True, slots=True)
class Mount:
    """One application resolved onto a listener."""

    listener: str
    context_root: str
    resource_config: ResourceConfig
    executor: Executor | None = None
    app_class_name: str | None = None


class Server:
    """A fully resolved server. Read-only."""

    __slots__ = ("_mounts", "config")

    def __init__(self, config: ServerConfig, mounts: tuple[Mount, ...]) -> None:
        self.config: ServerConfig = config
        self._mounts: tuple[Mount, ...] = mounts

    @property
    def mounts(self) -> tuple[Mount, ...]:
        return self._mounts

    def mounts_for(self, listener: str) -> tuple[Mount, ...]:
        return tuple(m for m in self._mounts if m.listener == listener)

    @classmethod
    def builder(cls, config: ServerConfig | None = None) -> "ServerBuilder":
        return ServerBuilder(config)


class ServerBuilder:
    """Collects applications and resolves them into a ``Server``.

    Usage::

        server = (
            ServerBuilder(ServerConfig(listeners=(ListenerConfig("admin"),)))
            .add_application(ShopApp)
            .add_application(AdminApp(), context_root="/admin")
            .default_executor(pool)
            .build()
        )
    """

    __slots__ = ("_config", "_default_executor", "_registrations")

    def __init__(self, config: ServerConfig | None = None) -> None:
        self._config: ServerConfig = config or ServerConfig()
        self._registrations: list[ApplicationRegistration] = []
        self._default_executor: Executor | None = None

    def add_application(
        self,
        application: ApplicationRegistration | Application | type[Application],
        *,
        context_root: str | None = None,
    ) -> "ServerBuilder":
        """Add an application to mount.

        Accepts a built registration, an application instance (including
        a ``ResourceConfig``), or an application class. *context_root*
        overrides whatever the registration or class metadata says.
        """
        if isinstance(application, ApplicationRegistration):
            registration = application
            if context_root is not None:
                registration = replace(registration, context_root=context_root)
        else:
            builder = ApplicationRegistration.builder()
            if isinstance(application, type):
                builder.application_class(application)
            else:
                builder.application(application)
            if context_root is not None:
                builder.context_root(context_root)
            registration = builder.build()
        self._registrations.append(registration)
        return self

    def default_executor(self, executor: Executor) -> "ServerBuilder":
        """Executor for applications that do not bring their own.

        The server never shuts it down.
        """
        self._default_executor = executor
        return self

    def build(self) -> Server:
        """Resolve every registration, then freeze descriptors and mount them.

        All validation runs before any descriptor is frozen, so a failed
        ``build()`` leaves the registered applications untouched.
        """
        resolved: list[tuple[str, ApplicationRegistration]] = []
        taken: dict[tuple[str, str], str] = {}

        for registration in self._registrations:
            listener = self._resolve_listener(registration)
            label = _label(registration)

            key = (listener, registration.context_root)
            if key in taken:
                msg = (
                    f"Application {label} and application {taken[key]} are both "
                    f"mounted on {registration.context_root!r} of listener {listener!r}."
                )
                raise ConfigurationError(msg)
            taken[key] = label
            registration.resource_config.check_constructible()
            resolved.append((listener, registration))

        mounts: list[Mount] = []
        for listener, registration in resolved:
            registration.resource_config.freeze()
            executor = registration.executor
            if executor is None:
                executor = self._default_executor
            mounts.append(
                Mount(
                    listener=listener,
                    context_root=registration.context_root,
                    resource_config=registration.resource_config,
                    executor=executor,
                    app_class_name=registration.app_class_name,
                )
            )
            logger.debug(
                "Mounted %s at %s on listener %s",
                _label(registration),
                registration.context_root,
                listener,
            )

        return Server(self._config, tuple(mounts))

    # -- Internal --

    def _resolve_listener(self, registration: ApplicationRegistration) -> str:
        name = registration.routing_name
        if name is None or name == DEFAULT_ROUTING:
            return DEFAULT_LISTENER
        if self._config.listener(name) is not None:
            return name
        if registration.routing_name_required:
            msg = (
                f"Application {_label(registration)} requires listener {name!r}, "
                f"which is not configured. Configured listeners: "
                f"{', '.join(sorted(self._config.listener_names))}."
            )
            raise ConfigurationError(msg)
        logger.warning(
            "Application %s wants listener %r, which is not configured; "
            "mounting it on the default listener",
            _label(registration),
            name,
        )
        return DEFAULT_LISTENER


def _label(registration: ApplicationRegistration) -> str:
    return registration.app_class_name or repr(registration.resource_config)
