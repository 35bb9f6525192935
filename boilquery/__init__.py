"""Composable SQL query building: query mods, SQL rendering and value helpers."""

__version__ = "0.1.0"