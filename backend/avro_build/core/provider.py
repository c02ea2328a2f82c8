"""
Lazy values - Providers and Properties

Nothing in the build configuration may be read before every piece of
configuration that could change it has run. Values that depend on other
configuration (output directories, encodings, classpaths) are therefore
represented as providers: thunks evaluated only when a consumer calls get().

Usage:
    build_dir = Property("build directory").convention(project_dir / "build")
    output_dir = build_dir.map(lambda d: d / "generated-main-avro-source")
    build_dir.set(project_dir / "out")
    output_dir.get()  # -> project_dir / "out" / "generated-main-avro-source"
"""
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class MissingValueError(Exception):
    """Raised when a lazy value is read but nothing resolves it"""
    pass


def unwrap(value: Any) -> Any:
    """Resolve providers (possibly nested) to their current value, or None"""
    while isinstance(value, Provider):
        value = value.get_or_none()
    return value


class Provider(Generic[T]):
    """
    A value computed on read

    The factory runs on every get(); providers never cache, so they always
    reflect the latest configuration.
    """

    def __init__(self, factory: Callable[[], Any], description: str = "value"):
        self._factory = factory
        self.description = description

    def get_or_none(self) -> Optional[T]:
        return unwrap(self._factory())

    def get(self) -> T:
        value = self.get_or_none()
        if value is None:
            raise MissingValueError(f"Cannot query the value of {self.description} because it has no value available.")
        return value

    def is_present(self) -> bool:
        return self.get_or_none() is not None

    def map(self, transform: Callable[[T], R]) -> "Provider[R]":
        """Derive a provider; the transform is skipped while this one has no value"""
        def factory():
            value = self.get_or_none()
            return None if value is None else transform(value)
        return Provider(factory, self.description)

    def or_else(self, default: Any) -> "Provider[T]":
        def factory():
            value = self.get_or_none()
            return unwrap(default) if value is None else value
        return Provider(factory, self.description)

    def __repr__(self):
        return f"{type(self).__name__}({self.description})"


class Property(Provider[T]):
    """
    A settable lazy value with an optional convention

    An explicitly set value wins over the convention. Both may be plain
    values or providers; providers are resolved at read time.
    """

    def __init__(self, description: str = "property"):
        super().__init__(self._resolve, description)
        self._value: Any = None
        self._convention: Any = None

    def set(self, value: Any) -> "Property[T]":
        self._value = value
        return self

    def convention(self, value: Any) -> "Property[T]":
        self._convention = value
        return self

    @property
    def is_explicitly_set(self) -> bool:
        return self._value is not None

    def _resolve(self) -> Any:
        value = unwrap(self._value)
        if value is None:
            value = unwrap(self._convention)
        return value


__all__ = ["Provider", "Property", "MissingValueError", "unwrap"]
