"""Daffodil: deploy to a remote server over SSH with ordered, named steps."""

from .config import DeployerConfig, load_config
from .deployer import Daffodil
from .errors import (
    AuthenticationError,
    DaffodilError,
    DeploymentError,
    PathNotFoundError,
    RemoteConnectionError,
    TransferError,
)
from .orchestrator import DeploymentReport, DeploymentStep

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "Daffodil",
    "DaffodilError",
    "DeployerConfig",
    "DeploymentError",
    "DeploymentReport",
    "DeploymentStep",
    "PathNotFoundError",
    "RemoteConnectionError",
    "TransferError",
    "load_config",
]
