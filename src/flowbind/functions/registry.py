"""Function registry used by template calls and pipelines."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from flowbind.errors import TemplateError, create_error, get_error_factory
from flowbind.logging import get_logger
from flowbind.types import ValueKind
from flowbind.value import Value

if TYPE_CHECKING:
    from flowbind.config import FunctionsConfig

logger = get_logger("functions")

_MISSING = object()


@dataclass
class Parameter:
    """One positional parameter of a template function."""

    name: str
    value_type: ValueKind | None = None  # None accepts any value
    required: bool = True
    default: Any = _MISSING

    def accepts(self, value: Value) -> bool:
        if self.value_type is None or value.kind is self.value_type:
            return True
        # Integers widen to floats
        return self.value_type is ValueKind.FLOAT and value.is_integer()


@dataclass
class FunctionSignature:
    """Ordered parameters, optionally accepting any number of extra arguments."""

    parameters: list[Parameter] = field(default_factory=list)
    variadic: bool = False

    @classmethod
    def any(cls) -> FunctionSignature:
        """Signature accepting any arguments unchecked."""
        return cls(parameters=[], variadic=True)

    def bind(self, function: str, args: list[Value]) -> list[Value]:
        """Check arguments against the signature and fill in defaults.

        Args:
            function: Function name, for error messages
            args: Evaluated arguments

        Returns:
            Arguments with defaults appended for omitted optional parameters

        Raises:
            SignatureError: On arity or type mismatch
        """
        if not self.variadic and len(args) > len(self.parameters):
            raise create_error(
                "SIGNATURE_ERROR",
                function=function,
                detail=f"expected at most {len(self.parameters)} arguments, got {len(args)}",
            )

        bound = list(args)
        for index, param in enumerate(self.parameters):
            if index < len(args):
                if not param.accepts(args[index]):
                    raise create_error(
                        "SIGNATURE_ERROR",
                        function=function,
                        detail=(
                            f"argument '{param.name}' must be {param.value_type.value}, "  # type: ignore[union-attr]
                            f"got {args[index].type_name()}"
                        ),
                    )
            elif param.required:
                raise create_error(
                    "SIGNATURE_ERROR",
                    function=function,
                    detail=f"missing required argument '{param.name}'",
                )
            elif param.default is not _MISSING:
                bound.append(Value.of(param.default))
            else:
                break
        return bound


@runtime_checkable
class TemplateFunction(Protocol):
    """Anything callable from a template by name."""

    name: str
    signature: FunctionSignature

    def execute(self, args: list[Value]) -> Value: ...


class FunctionLookup(Protocol):
    """Read-only registry view the evaluator depends on."""

    def get(self, name: str) -> TemplateFunction | None: ...


@dataclass
class Function:
    """Template function backed by a Python callable.

    The callable receives the bound argument list and may return a Value or
    plain Python data.
    """

    name: str
    func: Callable[[list[Value]], Any]
    signature: FunctionSignature = field(default_factory=FunctionSignature.any)
    description: str = ""

    def execute(self, args: list[Value]) -> Value:
        """Run the function.

        Args:
            args: Evaluated arguments, in call order

        Returns:
            Result value

        Raises:
            SignatureError: If the arguments do not fit the signature
            TemplateError: Errors raised by the callable propagate unchanged;
                other exceptions are converted by the error factory
        """
        bound = self.signature.bind(self.name, args)
        try:
            result = self.func(bound)
        except TemplateError:
            raise
        except Exception as e:
            logger.warning(
                f"Function '{self.name}' failed: {e}",
                function=self.name,
                error_type=type(e).__name__,
            )
            raise get_error_factory().from_exception(
                e, function=self.name, arguments=[str(arg) for arg in args]
            ) from e
        return Value.of(result)


class FunctionRegistry:
    """Name to function mapping passed to templates as a capability."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._functions: dict[str, TemplateFunction] = {}

    def register(self, function: TemplateFunction) -> None:
        """Register or replace a function under its name.

        Args:
            function: Function to register
        """
        self._functions[function.name] = function

    def register_callable(
        self,
        name: str,
        func: Callable[[list[Value]], Any],
        signature: FunctionSignature | None = None,
        description: str = "",
    ) -> Function:
        """Wrap a Python callable and register it.

        Args:
            name: Name used in templates
            func: Callable receiving the bound argument list
            signature: Parameter signature (unchecked when omitted)
            description: Human-readable description

        Returns:
            The registered Function
        """
        function = Function(
            name=name,
            func=func,
            signature=signature or FunctionSignature.any(),
            description=description,
        )
        self.register(function)
        return function

    def function(
        self,
        name: str | None = None,
        signature: FunctionSignature | None = None,
        description: str = "",
    ) -> Callable[[Callable[[list[Value]], Any]], Callable[[list[Value]], Any]]:
        """Decorator form of register_callable.

        Example:
            @registry.function("double")
            def double(args):
                return args[0].as_integer() * 2
        """

        def decorator(func: Callable[[list[Value]], Any]) -> Callable[[list[Value]], Any]:
            self.register_callable(name or func.__name__, func, signature, description)
            return func

        return decorator

    def get(self, name: str) -> TemplateFunction | None:
        return self._functions.get(name)

    def unregister(self, name: str) -> bool:
        """Remove a function.

        Returns:
            True if the function was registered
        """
        return self._functions.pop(name, None) is not None

    def names(self) -> list[str]:
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._functions)

    @classmethod
    def with_builtins(cls) -> FunctionRegistry:
        """Registry pre-populated with the standard function set."""
        from .builtins import BUILTIN_FUNCTIONS

        registry = cls()
        for function in BUILTIN_FUNCTIONS.values():
            registry.register(function)
        return registry

    @classmethod
    def from_config(cls, config: FunctionsConfig) -> FunctionRegistry:
        """Build a registry from the ``functions`` config section.

        Args:
            config: Functions configuration

        Returns:
            Registry with builtins (if enabled) minus disabled names
        """
        registry = cls.with_builtins() if config.builtins else cls()
        for name in config.disabled:
            registry.unregister(name)
        return registry
