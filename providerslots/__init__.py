"""
providerslots - appointment slot availability for marketplace providers.
"""

__version__ = "0.1.0"
