"""Roost: mount several web applications on one server.

Each application is described by a ``ResourceConfig`` and registered with
an immutable ``ApplicationRegistration`` carrying its context root, the
listener it binds to, and an optional shared executor.

Basic usage::

    from roost import Application, ServerBuilder, application_path

    @application_path("/shop")
    class ShopApp(Application):
        def classes(self):
            return {CartResource}

    server = ServerBuilder().add_application(ShopApp).build()
"""

__version__ = "0.1.0-dev"
__all__ = [
    "DEFAULT_ROUTING",
    "AppMetadata",
    "Application",
    "ApplicationRegistration",
    "ApplicationRegistrationBuilder",
    "ConfigurationError",
    "ListenerConfig",
    "Mount",
    "ResourceConfig",
    "RoostError",
    "RoutingName",
    "Server",
    "ServerBuilder",
    "ServerConfig",
    "application_path",
    "metadata_of",
    "routing_name",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name in (
        "DEFAULT_ROUTING",
        "AppMetadata",
        "Application",
        "RoutingName",
        "application_path",
        "metadata_of",
        "routing_name",
    ):
        from roost import application as _application

        return getattr(_application, name)

    if name == "ResourceConfig":
        from roost.resources import ResourceConfig

        return ResourceConfig

    if name in ("ApplicationRegistration", "ApplicationRegistrationBuilder"):
        from roost import registration as _registration

        return getattr(_registration, name)

    if name in ("ListenerConfig", "ServerConfig"):
        from roost import config as _config

        return getattr(_config, name)

    if name in ("Mount", "Server", "ServerBuilder"):
        from roost import server as _server

        return getattr(_server, name)

    if name in ("RoostError", "ConfigurationError"):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
