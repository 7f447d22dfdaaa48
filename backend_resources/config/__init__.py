"""Configuration module for the backend-resources service."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
