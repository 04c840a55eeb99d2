"""
Deployment and distribution units.
"""
from .deployer import DeploymentUnit
from .distributor import DistributionUnit

__all__ = ["DeploymentUnit", "DistributionUnit"]
