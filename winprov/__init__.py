"""
winprov: deployment helpers for provisioning Windows servers.
"""

__version__ = "0.3.0"
