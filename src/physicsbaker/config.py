"""
Configuration & Constants
=========================
This module serves as the central registry for global constants.

Why is this file needed?
------------------------
1. Format limits: The motion format caps how many bone keyframes one file may
   hold. Every component that splits or counts keyframes reads it from here.
2. Defaults: New records (world physics, wind) start from the same values in
   every entry point (CLI, workers, tests).

Exports:
    MAX_BONE_FRAMES (int): Maximum bone keyframes in one output motion file.
    OUTPUT_PREFIX (str): Marker inserted into generated file and bone names.
"""

# Motion format limits
MAX_BONE_FRAMES: int = 20_000
BONE_NAME_BYTE_LIMIT: int = 15  # Shift-JIS bytes

# World physics defaults
DEFAULT_GRAVITY: float = -9.8
DEFAULT_MAX_SUB_STEPS: int = 2
DEFAULT_FIXED_TIME_STEP: float = 60.0

# Wind defaults
DEFAULT_WIND_TURBULENCE_FREQ_HZ: float = 0.5
DEFAULT_WIND_DRAG_COEFF: float = 1.0
DEFAULT_WIND_LIFT_COEFF: float = 0.2

# Output naming
OUTPUT_PREFIX: str = "BB"
RECORD_FILE_EXTENSION: str = ".json"
MOTION_FILE_EXTENSION: str = ".h5"

# Progress logging while splitting (in keyframes)
LOG_INTERVAL: int = 100_000
