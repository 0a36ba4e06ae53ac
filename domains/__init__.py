"""Domain modules for Household Assistant."""

from .base import ButtonSpec, CommandResult, ListDomain

__all__ = ["ButtonSpec", "CommandResult", "ListDomain"]
