"""Application registrations.

An ``ApplicationRegistration`` is what a server mounts: a descriptor plus
the mount-level settings that are not part of the descriptor itself.
It is built once, during server setup, and never mutated afterwards.

Basic usage::

    registration = (
        ApplicationRegistration.builder()
        .application_class(ShopApp)
        .context_root("/shop")
        .executor(pool)
        .build()
    )
    server_builder.add_application(registration)
"""

from concurrent.futures import Executor
from dataclasses import dataclass

from roost.application import Application, metadata_of
from roost.errors import ConfigurationError
from roost.resources import ResourceConfig

DEFAULT_CONTEXT_ROOT = "/"


@dataclass(frozen=True, slots=True)
class ApplicationRegistration:
    """An application ready to be mounted. Immutable after creation.

    Safe to read from any number of server threads.
    """

    context_root: str
    resource_config: ResourceConfig
    executor: Executor | None = None
    app_class_name: str | None = None
    routing_name: str | None = None
    routing_name_required: bool = False

    @classmethod
    def builder(cls) -> "ApplicationRegistrationBuilder":
        return ApplicationRegistrationBuilder()

    @classmethod
    def create(
        cls, application: Application | type[Application]
    ) -> "ApplicationRegistration":
        """Register an application instance or class with all defaults.

        Context root and routing name come from the class metadata, else
        the root context on the default listener with the server executor.
        """
        builder = cls.builder()
        if isinstance(application, type):
            builder.application_class(application)
        else:
            builder.application(application)
        return builder.build()


class ApplicationRegistrationBuilder:
    """Fluent builder for ``ApplicationRegistration``.

    Explicit setters always overwrite. Metadata read off an application
    class only fills fields that are still unset at the time the
    application is supplied, so an explicit ``context_root()`` wins
    whichever side of ``application_class()`` it is called on.
    """

    __slots__ = (
        "_app_class_name",
        "_config",
        "_context_root",
        "_executor",
        "_routing_name",
        "_routing_name_required",
    )

    def __init__(self) -> None:
        self._context_root: str | None = None
        self._config: ResourceConfig | None = None
        self._executor: Executor | None = None
        self._app_class_name: str | None = None
        self._routing_name: str | None = None
        self._routing_name_required: bool = False

    def context_root(self, context_root: str) -> "ApplicationRegistrationBuilder":
        """Mount the application on *context_root* (defaults to ``"/"``)."""
        self._context_root = context_root
        return self

    def routing_name(
        self, name: str, *, required: bool = False
    ) -> "ApplicationRegistrationBuilder":
        """Bind the application to the listener called *name*."""
        self._routing_name = name
        self._routing_name_required = required
        return self

    def config(self, config: ResourceConfig) -> "ApplicationRegistrationBuilder":
        """Use *config* as the descriptor, replacing any previous application."""
        self._config = config
        return self

    def application(self, application: Application) -> "ApplicationRegistrationBuilder":
        """Use a live application instance, replacing any previous application.

        A ``ResourceConfig`` is used as the descriptor directly; any other
        application is adapted with ``ResourceConfig.for_application()``.
        """
        if isinstance(application, ResourceConfig):
            self._config = application
        else:
            self._config = ResourceConfig.for_application(application)
        self._apply_metadata(type(application))
        return self

    def application_class(
        self, app_class: type[Application]
    ) -> "ApplicationRegistrationBuilder":
        """Use an application class, replacing any previous application."""
        self._config = ResourceConfig.for_application_class(app_class)
        self._apply_metadata(app_class)
        return self

    def executor(self, executor: Executor) -> "ApplicationRegistrationBuilder":
        """Run this application's requests on *executor*.

        Executors may be shared between applications. The caller keeps
        ownership and is responsible for shutting it down.
        """
        self._executor = executor
        return self

    def build(self) -> ApplicationRegistration:
        if self._config is None:
            msg = (
                "No application configured. Call config(), application() or "
                "application_class() before build()."
            )
            raise ConfigurationError(msg)
        return ApplicationRegistration(
            context_root=(
                DEFAULT_CONTEXT_ROOT if self._context_root is None else self._context_root
            ),
            resource_config=self._config,
            executor=self._executor,
            app_class_name=self._app_class_name,
            routing_name=self._routing_name,
            routing_name_required=self._routing_name_required,
        )

    # -- Internal --

    def _apply_metadata(self, cls: type) -> None:
        metadata = metadata_of(cls)
        if self._context_root is None and metadata.path is not None:
            self._context_root = metadata.path
        if self._routing_name is None and metadata.routing is not None:
            self._routing_name = metadata.routing.value
            self._routing_name_required = metadata.routing.required
        self._app_class_name = f"{cls.__module__}.{cls.__qualname__}"
