"""Dependency injection containers."""

from macrobias.infrastructure.containers.container import (
    Container,
    get_container,
    reset_container,
    set_container,
)

__all__ = ["Container", "get_container", "set_container", "reset_container"]
