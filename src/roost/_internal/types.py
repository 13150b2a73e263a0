"""Shared type aliases used across roost modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Resource component: a resource class or an already-built resource instance
Component: TypeAlias = type | object

# Provider factory: zero-argument callable returning a service instance
Factory: TypeAlias = Callable[[], Any]
