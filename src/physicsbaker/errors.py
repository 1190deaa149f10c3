"""
Error Taxonomy
==============
All failures raised by the bake engine derive from ``BakeError``.

* Validation errors are fatal for the record they describe and are never retried.
* ``NoBakeableKeyframesError`` is fatal for one output selection only; callers
  keep processing sibling selections.
* Dependency errors come from the model/motion readers and abort the run.

Each message names the offending time range or selection index so a host UI
can highlight the record that failed.
"""
from __future__ import annotations

from typing import Iterable, Optional


class BakeError(Exception):
    """Base class for every error raised by the bake engine."""


class ValidationError(BakeError, ValueError):
    """A user record is malformed."""


class InvalidTimeRangeError(ValidationError):
    def __init__(self, start_frame: float, end_frame: float, index: Optional[int] = None):
        self.start_frame = start_frame
        self.end_frame = end_frame
        self.index = index
        where = f" [No.{index + 1:02d}]" if index is not None else ""
        super().__init__(f"Invalid time range{where}: {start_frame} - {end_frame}")


class RampOrderError(ValidationError):
    def __init__(
        self,
        start_frame: float,
        max_start_frame: float,
        max_end_frame: float,
        end_frame: float,
        index: Optional[int] = None,
    ):
        self.frames = (start_frame, max_start_frame, max_end_frame, end_frame)
        self.index = index
        where = f" [No.{index + 1:02d}]" if index is not None else ""
        super().__init__(
            f"Ramp frames must satisfy start <= max start <= max end <= end{where}: "
            f"{start_frame} / {max_start_frame} / {max_end_frame} / {end_frame}"
        )


class NoOutputBonesError(ValidationError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"No output bones selected [No.{index + 1:02d}]")


class NoBakeableKeyframesError(BakeError):
    def __init__(self, index: int, start_frame: float, end_frame: float):
        self.index = index
        self.start_frame = start_frame
        self.end_frame = end_frame
        super().__init__(
            f"No bake-able keyframes [No.{index + 1:02d}] in frames {start_frame} - {end_frame}"
        )


class DependencyError(BakeError):
    """A model or motion the bake depends on could not be provided."""


class MissingBonesError(DependencyError):
    def __init__(self, model_name: str, bone_names: Iterable[str]):
        self.model_name = model_name
        self.bone_names = list(bone_names)
        super().__init__(
            f"Model '{model_name}' is missing required bones: {', '.join(self.bone_names)}"
        )


class ModelLoadError(DependencyError):
    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class DependencyFileError(DependencyError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read '{path}': {reason}")
