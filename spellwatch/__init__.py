"""Spellwatch: rainfall spell and ponding-point monitoring."""

__version__ = "0.1.0"
