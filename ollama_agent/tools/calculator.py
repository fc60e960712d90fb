"""
Calculator Tool
===============

Basic arithmetic on two operands: add, subtract, multiply, divide.

The tool is pure: the same arguments always produce the same result string.
Argument problems are reported as "Error: ..." strings, never raised.
"""

import math
import operator
from numbers import Real

from ollama_agent.tools import ToolDefinition, tool_registry
from ollama_agent.utils.logger import Logger

logger = Logger("Calculator")

OPERATIONS = {
    "add": operator.add,
    "subtract": operator.sub,
    "multiply": operator.mul,
    "divide": operator.truediv,
}


def format_number(value: float) -> str:
    """
    Render a number the way it reads naturally.

    Integral values drop the fractional part (4.0 -> "4"); others keep it.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _operand(params: dict, key: str) -> Real:
    """
    Read a numeric operand.

    Numeric strings such as "2" or "2.5" are accepted since models sometimes
    quote numbers.

    Raises:
        ValueError: If the operand is missing or not a number
    """
    if key not in params or params[key] is None:
        raise ValueError(f"Missing required argument: {key}")

    value = params[key]
    if isinstance(value, bool):
        raise ValueError(f"Argument '{key}' must be a number, got {value!r}")
    if isinstance(value, Real):
        return value
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            raise ValueError(f"Argument '{key}' must be a number, got {value!r}") from None
        if not math.isfinite(number):
            raise ValueError(f"Argument '{key}' must be a finite number, got {value!r}")
        return int(number) if number.is_integer() and "." not in value else number

    raise ValueError(f"Argument '{key}' must be a number, got {value!r}")


async def _calculate(params: dict) -> str:
    operation = params.get("operation")
    if not isinstance(operation, str) or operation not in OPERATIONS:
        return f"Error: Unknown operation: {operation}"

    try:
        a = _operand(params, "a")
        b = _operand(params, "b")
    except ValueError as e:
        return f"Error: {e}"

    if operation == "divide" and b == 0:
        return "Error: Division by zero is not allowed"

    try:
        result = OPERATIONS[operation](a, b)
    except OverflowError:
        return f"Error: Result of {operation} is too large"

    logger.debug(f"{a} {operation} {b} = {result}")
    return (
        f"The result of {format_number(a)} {operation} {format_number(b)} "
        f"is {format_number(result)}"
    )


calculator_tool = ToolDefinition(
    name="calculator",
    description="A calculator tool that can perform basic arithmetic operations",
    parameters={
        "type": "object",
        "properties": {
            "operation": {
                "type": "string",
                "enum": list(OPERATIONS),
                "description": "The arithmetic operation to perform"
            },
            "a": {
                "type": "number",
                "description": "The first operand"
            },
            "b": {
                "type": "number",
                "description": "The second operand"
            }
        },
        "required": ["operation", "a", "b"]
    },
    execute=_calculate
)


def register_calculator_tool():
    """Register the calculator with the process-wide registry."""
    tool_registry.register(calculator_tool)


# Auto-register on import
register_calculator_tool()
