"""CalculatorCatalog — the arithmetic tools exposed by the server.

``add`` sums two numbers; ``calculate`` applies one of four binary operators.
Division by zero is not a protocol error: it yields a normal result whose text
explains the problem. Results too large for a float saturate to ``Infinity``.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable
from typing import Any

from mcpcalc.protocols.errors import InvalidArgumentsError, ToolNotFoundError, UnknownOperationError
from mcpcalc.protocols.mcp.models import ToolCallResult, ToolDescriptor

DIVIDE_BY_ZERO_TEXT = "Error: Cannot divide by zero"

# floats at or above this magnitude keep exponent notation
_EXPONENT_THRESHOLD = 1e21

_OPERATIONS: dict[str, Callable[[Any, Any], Any]] = {
    "add": operator.add,
    "subtract": operator.sub,
    "multiply": operator.mul,
    "divide": operator.truediv,
}

_OPERAND_SCHEMA: dict[str, Any] = {
    "a": {"type": "number"},
    "b": {"type": "number"},
}

_TOOLS = (
    ToolDescriptor(
        name="add",
        description="Add two numbers",
        input_schema={
            "type": "object",
            "properties": dict(_OPERAND_SCHEMA),
            "required": ["a", "b"],
        },
    ),
    ToolDescriptor(
        name="calculate",
        description="Perform basic arithmetic operations",
        input_schema={
            "type": "object",
            "properties": {
                "operation": {"type": "string", "enum": list(_OPERATIONS)},
                **_OPERAND_SCHEMA,
            },
            "required": ["operation", "a", "b"],
        },
    ),
)


class CalculatorCatalog:
    """Satisfies the :class:`~mcpcalc.protocols.provider.ToolCatalog` protocol."""

    def __init__(self) -> None:
        self._tools = {tool.name: tool for tool in _TOOLS}
        self._handlers: dict[str, Callable[[dict[str, Any]], ToolCallResult]] = {
            "add": self._add,
            "calculate": self._calculate,
        }

    def list_tools(self) -> list[ToolDescriptor]:
        return list(self._tools.values())

    def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolCallResult:
        handler = self._handlers.get(name)
        if handler is None:
            raise ToolNotFoundError(name)
        return handler(arguments)

    def _add(self, arguments: dict[str, Any]) -> ToolCallResult:
        a, b = _operands(arguments)
        return ToolCallResult.from_text(_evaluate(operator.add, a, b))

    def _calculate(self, arguments: dict[str, Any]) -> ToolCallResult:
        operation = arguments.get("operation")
        func = _OPERATIONS.get(operation) if isinstance(operation, str) else None
        if func is None:
            raise UnknownOperationError(operation)
        a, b = _operands(arguments)
        if operation == "divide" and b == 0:
            return ToolCallResult.from_text(DIVIDE_BY_ZERO_TEXT)
        return ToolCallResult.from_text(_evaluate(func, a, b))


def _operands(arguments: dict[str, Any]) -> tuple[int | float, int | float]:
    values: list[int | float] = []
    for key in ("a", "b"):
        if key not in arguments:
            raise InvalidArgumentsError(f"Missing required argument: {key}")
        value = arguments[key]
        # bool is an int subclass but not a JSON number
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidArgumentsError(f"Argument '{key}' must be a number")
        values.append(value)
    return values[0], values[1]


def _evaluate(func: Callable[[Any, Any], Any], a: int | float, b: int | float) -> str:
    """Apply *func* and render the result; float overflow saturates to ``Infinity``."""
    try:
        result = func(a, b)
    except OverflowError:
        result = func(_saturate(a), _saturate(b))
    if isinstance(result, int):
        try:
            return str(result)
        except ValueError:
            # beyond the int-to-str digit limit
            result = _saturate(result)
    return _format_float(result)


def _saturate(value: int | float) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _format_float(value: float) -> str:
    """Render like a JavaScript number: ``2`` not ``2.0``, ``Infinity``, ``NaN``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
        return str(int(value))
    return repr(value)
