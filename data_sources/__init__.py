"""
Data Sources Module
Async clients for the Polymarket Gamma and CLOB APIs
"""

from .gamma_client import GammaAPIClient
from .clob_client import ClobAPIClient

__all__ = ['GammaAPIClient', 'ClobAPIClient']
