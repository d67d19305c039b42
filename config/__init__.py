"""
Configuration for the weekly market watch.
"""

from .settings import (
    Settings,
    TrackingSettings,
    AlertSettings,
    MonitoringSettings,
    APISettings,
    ServerSettings,
    load_settings,
    read_config_file
)

__all__ = [
    'Settings',
    'TrackingSettings',
    'AlertSettings',
    'MonitoringSettings',
    'APISettings',
    'ServerSettings',
    'load_settings',
    'read_config_file'
]
