"""
Monitoring Agent Layer.

This package installs the agent configuration and manages the agent service.
"""

from .installer import PowerShellServiceController, ServiceController, install_config

__all__ = ["PowerShellServiceController", "ServiceController", "install_config"]
