"""Template model registry.

Template models are named objects placed in every render context. They come
from two places:

- instances contributed by plugins, taken as-is
- ``template_models`` configuration bindings of ``name = "identifier"``,
  where the identifier names a factory called as ``factory(site, config)``

Identifiers are looked up in the in-process factory registry first and
otherwise imported as ``"package.module:attribute"``. Every binding is
resolved and constructed when the registry is built, so a bad binding fails
at startup rather than at first render.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from pagesmith.exceptions import InstantiationError
from pagesmith.utils import load_entrypoint

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from pagesmith.config import RendererConfig

    from ._site import Site


class ModelFactory(Protocol):
    """Callable building a template model for a site."""

    def __call__(self, site: Site, config: RendererConfig, /) -> object: ...


_factories: dict[str, ModelFactory] = {}
_factories_lock = threading.Lock()


def register_model_factory(identifier: str, factory: ModelFactory) -> None:
    """Register a template model factory under an identifier.

    Args:
        identifier: Name used in ``template_models`` bindings.
        factory: Callable taking ``(site, config)`` and returning the model.

    Raises:
        ValueError: If the identifier is already registered.
    """
    with _factories_lock:
        if identifier in _factories:
            msg = f"Model factory already registered: {identifier!r}"
            raise ValueError(msg)
        _factories[identifier] = factory


def unregister_model_factory(identifier: str) -> None:
    """Remove a registered factory. Unknown identifiers are ignored."""
    with _factories_lock:
        _ = _factories.pop(identifier, None)


def _resolve_factory(name: str, identifier: str) -> ModelFactory:
    with _factories_lock:
        registered = _factories.get(identifier)
    if registered is not None:
        return registered

    try:
        target = load_entrypoint(identifier)
    except Exception as e:
        # Importing the module runs arbitrary code
        msg = f"Cannot resolve template model {name!r}: {e}"
        raise InstantiationError(msg, name=name, identifier=identifier, cause=e) from e

    if not callable(target):
        msg = f"Template model factory for {name!r} is not callable: {identifier}"
        raise InstantiationError(msg, name=name, identifier=identifier)

    return target  # pyright: ignore[reportReturnType]


class TemplateModelRegistry(Mapping[str, object]):
    """Read-only mapping of template model names to instances."""

    __slots__ = ("_models",)

    def __init__(self, models: Mapping[str, object] | None = None) -> None:
        self._models: Mapping[str, object] = MappingProxyType(dict(models or {}))

    def __getitem__(self, key: str) -> object:
        return self._models[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"TemplateModelRegistry({sorted(self._models)!r})"

    def merge(self, context: Mapping[str, object] | None) -> dict[str, object]:
        """Build a render context from the registry and caller values.

        Registry entries go in first; caller entries are applied on top and
        win on name clashes.

        Args:
            context: Caller-supplied bindings.

        Returns:
            A new dictionary; neither input is modified.
        """
        merged: dict[str, object] = dict(self._models)
        if context:
            merged.update(context)
        return merged


def build_model_registry(
    site: Site,
    *,
    logger: FilteringBoundLogger | None = None,
) -> TemplateModelRegistry:
    """Build the registry from plugin models and configured bindings.

    Configured bindings replace plugin models of the same name.

    Args:
        site: Owning site; passed to every factory with its configuration.
        logger: Optional logger for diagnostics.

    Returns:
        The populated registry.

    Raises:
        InstantiationError: If a binding cannot be resolved or its factory
            raises.
    """
    models: dict[str, object] = dict(site.plugins.models)

    for name, identifier in site.config.template_models.items():
        factory = _resolve_factory(name, identifier)
        try:
            instance = factory(site, site.config)
        except Exception as e:
            msg = f"Failed to create template model {name!r} from {identifier}: {e}"
            raise InstantiationError(
                msg, name=name, identifier=identifier, cause=e
            ) from e

        if logger is not None:
            logger.debug("template_model_created", name=name, identifier=identifier)
        models[name] = instance

    return TemplateModelRegistry(models)
