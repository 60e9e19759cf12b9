"""Contracts Finder connector."""

from .connector import ContractsFinderConnector

__all__ = ["ContractsFinderConnector"]
