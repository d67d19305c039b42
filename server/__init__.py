"""
Inbound HTTP surface: the read-only health responder.
"""

from .health_server import HealthServer, create_app

__all__ = ['HealthServer', 'create_app']
