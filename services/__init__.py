"""
Upstream service clients.

Config-independent HTTP clients shared by the provider modules.
"""

from .socrata_client import SocrataClient, SocrataResponse

__all__ = ['SocrataClient', 'SocrataResponse']
