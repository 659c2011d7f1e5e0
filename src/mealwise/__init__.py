"""
Mealwise household meal-planning package.

The package exposes the meal-suggestion engine (constraint filtering, weekly assignment,
alternatives) and the grocery-aggregation engine, together with the persistence, HTTP and
CLI layers that drive them.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
