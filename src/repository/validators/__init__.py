"""Repository setup validators package.

This package contains validators that depend on the project
configuration and integrate with the main validation framework.
"""

from src.repository.validators.hosted_zone_validator import HostedZoneValidator

__all__ = ['HostedZoneValidator']
