"""
DevResourceHub API
Aggregates developer learning resources from article, video and book catalogs
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .app import create_app, run_server

__all__ = [
    'create_app',
    'run_server',
    '__version__',
]
