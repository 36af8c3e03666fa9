"""
Configuration handling for singleton registries.

Settings hierarchy: defaults → config.yaml → environment → overrides.
"""

from singleton_registry.config.settings import AppConfig, settings, load_settings

__all__ = [
    'AppConfig',
    'settings',
    'load_settings',
]
