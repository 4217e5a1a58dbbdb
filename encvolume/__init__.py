# Add Encrypted Volume - macOS startup disk volume automation
# This package contains the single-source-of-truth modules for the tool.
# =============================================================================
# Version
# =============================================================================
from .version import VERSION

# =============================================================================
# Workflow
# =============================================================================
from .config import VolumeRequest, build_request
from .errors import AddVolumeError, CommandError
from .volume import VolumeCreator, VolumeResult, add_encrypted_volume

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Version
    "VERSION",
    # Inputs
    "VolumeRequest",
    "build_request",
    # Workflow
    "VolumeCreator",
    "VolumeResult",
    "add_encrypted_volume",
    # Errors
    "AddVolumeError",
    "CommandError",
]
