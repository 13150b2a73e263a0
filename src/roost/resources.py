"""The mountable application descriptor.

Mutable during setup (component registration, providers, properties).
Frozen when the server resolves its mounts.
"""

import inspect
import threading
from collections.abc import Mapping
from typing import Any

from roost._internal.types import Component, Factory
from roost.application import Application
from roost.errors import ConfigurationError


class ResourceConfig(Application):
    """Descriptor enumerating an application's resources and providers.

    Built directly::

        config = ResourceConfig(name="admin")
        config.register(UserResource)
        config.provide(UserStore, make_store)

    or derived from an existing application with ``for_application()``
    or ``for_application_class()``. A ``ResourceConfig`` is itself an
    ``Application``, so it can be handed anywhere an application is
    accepted and is used as-is.

    Thread safety:
        Setup is single-threaded. ``freeze()`` uses a Lock + double-check
        so concurrent server threads compile the descriptor exactly once.
    """

    __slots__ = (
        "_application",
        "_application_class",
        "_classes",
        "_freeze_lock",
        "_frozen",
        "_properties",
        "_providers",
        "_singletons",
        "name",
    )

    def __init__(self, *components: Component, name: str | None = None) -> None:
        self.name: str | None = name
        self._classes: set[type] = set()
        # Keyed by id(): instances need not be hashable
        self._singletons: dict[int, object] = {}
        self._properties: dict[str, Any] = {}
        self._providers: dict[type, Factory] = {}
        self._application: Application | None = None
        self._application_class: type[Application] | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        for component in components:
            self.register(component)

    # -- Factories --

    @classmethod
    def for_application(cls, application: Application) -> "ResourceConfig":
        """Adapt a live application instance into a descriptor."""
        config = cls(name=type(application).__qualname__)
        config._application = application
        config._absorb(application)
        return config

    @classmethod
    def for_application_class(cls, app_class: type[Application]) -> "ResourceConfig":
        """Create a descriptor backed by an application class.

        The class is instantiated with no arguments when the descriptor
        is frozen, not before.
        """
        config = cls(name=app_class.__qualname__)
        config._application_class = app_class
        return config

    # -- Registration --

    def register(self, component: Component) -> "ResourceConfig":
        """Register a resource class or a resource instance."""
        self._check_not_frozen()
        if isinstance(component, type):
            self._classes.add(component)
        else:
            self._singletons.setdefault(id(component), component)
        return self

    def provide(self, annotation: type, factory: Factory) -> "ResourceConfig":
        """Register a provider factory for values of type *annotation*."""
        self._check_not_frozen()
        self._providers[annotation] = factory
        return self

    def set_property(self, name: str, value: Any) -> "ResourceConfig":
        self._check_not_frozen()
        self._properties[name] = value
        return self

    # -- Application protocol --

    def classes(self) -> set[type]:
        return set(self._classes)

    def singletons(self) -> list[object]:
        return list(self._singletons.values())

    def properties(self) -> Mapping[str, Any]:
        return dict(self._properties)

    @property
    def providers(self) -> Mapping[type, Factory]:
        return dict(self._providers)

    @property
    def application(self) -> Application | None:
        """The wrapped application instance, if any.

        For class-backed descriptors this is populated by ``freeze()``.
        """
        return self._application

    @property
    def application_class(self) -> type[Application] | None:
        return self._application_class

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Lifecycle --

    def freeze(self) -> None:
        """Compile the descriptor. Idempotent.

        Class-backed descriptors instantiate their application here and
        absorb its components.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            if self._application_class is not None and self._application is None:
                self._application = self._instantiate(self._application_class)
                self._absorb(self._application)
            self._frozen = True

    def check_constructible(self) -> None:
        """Fail now if ``freeze()`` would not be able to build the application.

        Only class-backed descriptors that are not yet frozen can fail.
        """
        if self._frozen or self._application_class is None:
            return
        _check_signature(self._application_class)

    # -- Internal --

    def _absorb(self, application: Application) -> None:
        self._classes.update(application.classes())
        for instance in application.singletons():
            self._singletons.setdefault(id(instance), instance)
        self._properties.update(application.properties())
        if isinstance(application, ResourceConfig):
            self._providers.update(application._providers)

    @staticmethod
    def _instantiate(app_class: type[Application]) -> Application:
        _check_signature(app_class)
        return app_class()

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                f"Cannot modify resource config {self.name or '<unnamed>'!r} after it "
                "has been mounted. Register components before building the server."
            )
            raise ConfigurationError(msg)

    def __repr__(self) -> str:
        return (
            f"ResourceConfig(name={self.name!r}, classes={len(self._classes)}, "
            f"singletons={len(self._singletons)}, frozen={self._frozen})"
        )


def _check_signature(app_class: type[Application]) -> None:
    # Only the call signature is checked; errors raised inside __init__ propagate
    try:
        inspect.signature(app_class).bind()
    except TypeError as exc:
        msg = (
            f"Cannot instantiate application class {app_class.__qualname__}: {exc}. "
            "Application classes must be constructible without arguments; "
            "register an instance instead."
        )
        raise ConfigurationError(msg) from exc
