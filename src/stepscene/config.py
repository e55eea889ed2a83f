"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: Layout constants (step spacing, sub-step offsets) and camera
   tuning live in one place instead of being scattered across the model and
   the view.
2. Storage: It decides where the saved-models library lives on disk.

Exports:
    STEP_SPACING (float): X distance between consecutive top-level steps.
    CAMERA_OFFSET (tuple): Camera offset from the followed node.
"""
from pathlib import Path


def get_library_path() -> str:
    """Default location of the saved-models collection."""
    data_dir = Path.home() / ".stepscene"
    data_dir.mkdir(parents=True, exist_ok=True)
    return str(data_dir / LIBRARY_FILENAME)


# Global Constants
LIBRARY_FILENAME: str = "saved_models.h5"

# Model defaults
DEFAULT_TITLE: str = "Untitled Model"
DEFAULT_NODE_SIZE: float = 1.0

# Layout of newly created nodes (world units)
STEP_SPACING: float = 3.0
SUBSTEP_DROP: float = 2.0
SUBSTEP_SPREAD: float = 2.0

# Viewer camera
CAMERA_OFFSET: tuple[float, float, float] = (5.0, 5.0, 5.0)
CAMERA_DAMPING: float = 0.05
FRAME_INTERVAL_MS: int = 16
