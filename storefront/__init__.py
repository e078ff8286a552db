"""
Storefront Checkout

Cart and checkout orchestration against a JSON:API storefront backend.
"""

__version__ = "1.0.0"
