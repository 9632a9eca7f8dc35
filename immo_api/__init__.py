"""
Immo Listing API: real-estate listing management service.
"""

__version__ = "1.0.0"
