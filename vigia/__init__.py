"""Vigia - rastreador de ocorrências observadas em feeds externos."""

__all__ = ["__version__"]

__version__ = "1.0.0"
