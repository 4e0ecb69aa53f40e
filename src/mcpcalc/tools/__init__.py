"""Built-in tool catalogs."""

from mcpcalc.tools.calculator import CalculatorCatalog

__all__ = ["CalculatorCatalog"]
