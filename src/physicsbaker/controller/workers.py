"""
Background Workers (Threading)
==============================
This module contains QThread subclasses for the long-running parts of a bake.

Why is this file needed?
------------------------
1. Responsiveness: Loading a model and composing large outputs can take a
   while. Hosts with an event loop push that work to background threads.
2. Fork-join loading: The physics-enabled and physics-disabled model variants
   are loaded concurrently. Both loads always run to completion, and every
   failure is reported together afterwards.
3. Signals: ``BakeWorker`` reports progress through Qt Signals, the same way
   a GUI progress bar would consume it.

Classes:
    ModelLoadWorker: Loads one model variant.
    BakeWorker: Runs the output stage of a bake.
"""
import logging
import queue
from typing import Callable, Iterable, Optional, Tuple

from PySide6.QtCore import QThread, Signal

from physicsbaker.controller.bake import BakeService, OutputResult
from physicsbaker.controller.model_prep import prefix_physics_bone_names
from physicsbaker.errors import ModelLoadError
from physicsbaker.model.io import IOManager
from physicsbaker.model.motion import Motion
from physicsbaker.model.rig import RigModel

logger = logging.getLogger(__name__)

ModelReader = Callable[..., RigModel]


class ModelLoadWorker(QThread):
    """Loads one model variant; failures are put on ``errors`` instead of raised."""

    def __init__(
        self,
        filepath: str,
        physics_enabled: bool,
        errors: "queue.Queue[str]",
        required_bones: Iterable[str] = (),
        reader: ModelReader = IOManager.load_model,
    ):
        super().__init__()
        self.filepath = filepath
        self.physics_enabled = physics_enabled
        self.errors = errors
        self.required_bones = tuple(required_bones)
        self.reader = reader
        self.result: Optional[RigModel] = None

    @property
    def variant(self) -> str:
        return "physics" if self.physics_enabled else "baked"

    def run(self):
        try:
            # Rename before disabling physics, the names follow the dynamic bodies
            model = prefix_physics_bone_names(
                self.reader(self.filepath, required_bones=self.required_bones)
            )
            if not self.physics_enabled:
                model = model.with_static_rigid_bodies()
            self.result = model
        except Exception as e:
            logger.error(f"Error in ModelLoadWorker ({self.variant}): {e}")
            self.errors.put(f"{self.variant} model: {e}")


def load_model_variants(
    filepath: str,
    required_bones: Iterable[str] = (),
    reader: ModelReader = IOManager.load_model,
) -> Tuple[RigModel, RigModel]:
    """
    Loads the physics-enabled and the physics-disabled (all rigid bodies
    STATIC) variants of one model concurrently.

    Returns:
        (original_model, baked_model)

    Raises:
        ModelLoadError: Listing every variant that failed to load.
    """
    errors: "queue.Queue[str]" = queue.Queue(maxsize=2)
    workers = [
        ModelLoadWorker(filepath, True, errors, required_bones, reader),
        ModelLoadWorker(filepath, False, errors, required_bones, reader),
    ]
    for worker in workers:
        worker.start()

    for worker in workers:
        worker.wait()

    messages = []
    while not errors.empty():
        messages.append(errors.get_nowait())
    if messages:
        raise ModelLoadError(messages)

    original, baked = (worker.result for worker in workers)
    logger.info(f"Loaded model variants from: {filepath}")
    return original, baked


class BakeWorker(QThread):
    # Signals to update the host from the background
    progress_updated = Signal(int, str)  # e.g., (50, "Baking output 2/4...")
    finished = Signal()
    error_occurred = Signal(str)

    def __init__(self, service: BakeService, original: Motion, baked: Motion, output_path: str,
                 save: bool = True):
        super().__init__()
        self.service = service
        self.original = original
        self.baked = baked
        self.output_path = output_path
        self.save = save
        self.result: Optional[OutputResult] = None

    def run(self):
        try:
            logger.info("Starting bake in background thread...")
            self.progress_updated.emit(0, "Starting bake...")

            # ---- Progress callback ----
            def progress_callback(percentage: int, message: str) -> None:
                self.progress_updated.emit(min(percentage, 98), message)

            result = self.service.bake_outputs(
                self.original, self.baked, self.output_path, progress=progress_callback
            )

            if self.save:
                self.progress_updated.emit(99, "Writing motion files...")
                for motion in result.motions:
                    IOManager.save_motion(motion)

            self.result = result
            for error in result.errors:
                self.error_occurred.emit(str(error))

            self.progress_updated.emit(100, "Bake finished.")
            self.finished.emit()

        except Exception as e:
            logger.error(f"Error in BakeWorker: {e}")
            self.error_occurred.emit(str(e))
