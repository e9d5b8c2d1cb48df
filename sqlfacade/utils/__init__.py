"""Utility functions and classes for sqlfacade."""

from sqlfacade.utils import logging, serializers

__all__ = ("logging", "serializers")
