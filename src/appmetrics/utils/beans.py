"""Bean factory declarations and dependency resolution."""

import inspect
import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..utils.properties import is_enabled

logger = logging.getLogger(__name__)


class NoSuchBeanError(LookupError):
    """Raised when a dependency cannot be resolved to a bean."""


@dataclass(frozen=True)
class BeanDefinition:
    name: str
    primary: bool = False


@dataclass(frozen=True)
class PropertyCondition:
    name: str
    match_if_missing: bool = True

    def matches(self, config: Mapping[str, Any]) -> bool:
        return is_enabled(config, self.name, self.match_if_missing)


def bean(name: Optional[str] = None, primary: bool = False) -> Callable:
    """Mark a configuration method as a bean factory.

    The bean is stored under ``name`` (default: the method name). A primary
    bean wins when several beans match a dependency's type.
    """

    def decorator(func: Callable) -> Callable:
        func._bean_definition = BeanDefinition(name or func.__name__, primary)
        return func

    return decorator


def conditional_on_property(name: str, match_if_missing: bool = True) -> Callable:
    """Only load the decorated configuration class when flag ``name`` is on."""

    def decorator(cls: type) -> type:
        conditions = list(getattr(cls, "_conditions", ()))
        conditions.append(PropertyCondition(name, match_if_missing))
        cls._conditions = tuple(conditions)
        return cls

    return decorator


def conditions_match(cls: type, config: Mapping[str, Any]) -> bool:
    return all(condition.matches(config) for condition in getattr(cls, "_conditions", ()))


def bean_methods(cls: type) -> List[Tuple[str, BeanDefinition]]:
    """The bean factory methods of ``cls`` in definition order."""
    methods = []
    for klass in reversed(cls.__mro__):
        for attr, value in vars(klass).items():
            definition = getattr(value, "_bean_definition", None)
            if definition is not None:
                methods.append((attr, definition))
    return methods


class BeanStore:
    """Named singletons, resolvable by name or by type."""

    def __init__(self) -> None:
        self._beans: Dict[str, Any] = {}
        self._primary: Dict[str, bool] = {}

    def add(self, name: str, instance: Any, primary: bool = False) -> None:
        if name in self._beans:
            raise ValueError(f"A bean named {name} already exists")
        self._beans[name] = instance
        self._primary[name] = primary

    def __contains__(self, name: str) -> bool:
        return name in self._beans

    def get(self, name: str) -> Any:
        try:
            return self._beans[name]
        except KeyError:
            raise NoSuchBeanError(f"No bean named {name}") from None

    def names(self) -> List[str]:
        return list(self._beans)

    def of_type(self, cls: type) -> Dict[str, Any]:
        return {name: b for name, b in self._beans.items() if isinstance(b, cls)}

    def by_type(self, cls: type) -> Any:
        candidates = self.of_type(cls)
        if len(candidates) == 1:
            return next(iter(candidates.values()))
        primaries = [name for name in candidates if self._primary[name]]
        if len(primaries) == 1:
            return candidates[primaries[0]]
        if not candidates:
            raise NoSuchBeanError(f"No bean of type {cls.__name__}")
        raise NoSuchBeanError(
            f"Expected a single bean of type {cls.__name__}, found {sorted(candidates)}"
        )

    def call(self, func: Callable) -> Any:
        """Call ``func`` with each parameter resolved by name, then by type."""
        signature = inspect.signature(func)
        try:
            hints = typing.get_type_hints(func.__init__ if inspect.isclass(func) else func)
        except (NameError, TypeError):
            hints = {}

        kwargs = {}
        for param in signature.parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.name in self._beans:
                kwargs[param.name] = self._beans[param.name]
                continue
            hint = hints.get(param.name)
            if isinstance(hint, type):
                try:
                    kwargs[param.name] = self.by_type(hint)
                    continue
                except NoSuchBeanError:
                    if param.default is param.empty:
                        raise
            if param.default is param.empty:
                raise NoSuchBeanError(
                    f"Cannot resolve parameter {param.name!r} of {getattr(func, '__qualname__', func)}"
                )
        return func(**kwargs)
