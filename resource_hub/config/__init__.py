"""
Settings and credential configuration
"""
from .settings import (
    Settings,
    get_settings,
)
from .security import (
    SecurityConfig,
    InputSanitizer,
    get_security_config,
    reset_security_config,
)

__all__ = [
    # Settings
    'Settings',
    'get_settings',

    # Security
    'SecurityConfig',
    'InputSanitizer',
    'get_security_config',
    'reset_security_config',
]
