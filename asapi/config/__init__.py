"""Configuration module for the authorization client."""
from .settings import Config, load_settings

__all__ = ["Config", "load_settings"]
