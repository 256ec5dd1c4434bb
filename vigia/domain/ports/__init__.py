"""Portas que conectam o domínio com serviços externos."""
from .geocoder import Geocoder

__all__ = ["Geocoder"]
