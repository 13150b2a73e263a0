"""Application base class and class-level mount metadata.

An application declares where it wants to live with two decorators::

    @application_path("/shop")
    @routing_name("public", required=True)
    class ShopApp(Application):
        def classes(self):
            return {CartResource, OrderResource}

The decorators attach a single frozen ``AppMetadata`` record to the class.
Registration reads it back with ``metadata_of()`` and only uses it to fill
fields the caller has not set explicitly.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any, TypeVar

# Routing name that always resolves to the server's default listener
DEFAULT_ROUTING = "@default"

_METADATA_ATTR = "__roost_metadata__"

_C = TypeVar("_C", bound=type)


class Application:
    """A mountable web application.

    Subclasses override any of the three hooks. Everything defaults to
    empty, so a bare subclass is a valid (if useless) application.
    """

    __slots__ = ()

    def classes(self) -> set[type]:
        """Resource classes, instantiated by the server per its own policy."""
        return set()

    def singletons(self) -> list[object]:
        """Resource instances shared for the lifetime of the application.

        Instances need not be hashable.
        """
        return []

    def properties(self) -> Mapping[str, Any]:
        return {}


@dataclass(frozen=True, slots=True)
class RoutingName:
    """Named listener an application binds to.

    ``required=True`` turns a missing listener into a startup failure
    instead of a fallback to the default listener.
    """

    value: str
    required: bool = False

    @property
    def is_default(self) -> bool:
        return self.value == DEFAULT_ROUTING


@dataclass(frozen=True, slots=True)
class AppMetadata:
    """Class-level mount metadata. Immutable after creation."""

    path: str | None = None
    routing: RoutingName | None = None


def metadata_of(cls: type) -> AppMetadata:
    """Return the metadata declared directly on *cls*.

    Metadata lives in the class's own namespace and is not inherited:
    a subclass of a decorated application starts with empty metadata.
    """
    found = vars(cls).get(_METADATA_ATTR)
    if isinstance(found, AppMetadata):
        return found
    return AppMetadata()


def _update(cls: type, **changes: Any) -> None:
    setattr(cls, _METADATA_ATTR, replace(metadata_of(cls), **changes))


def application_path(path: str) -> Callable[[_C], _C]:
    """Declare the context root an application is mounted on by default."""

    def decorator(cls: _C) -> _C:
        _update(cls, path=path)
        return cls

    return decorator


def routing_name(name: str, *, required: bool = False) -> Callable[[_C], _C]:
    """Declare the named listener an application is mounted on by default."""

    def decorator(cls: _C) -> _C:
        _update(cls, routing=RoutingName(name, required))
        return cls

    return decorator
