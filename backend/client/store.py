"""
In-memory state container for the editor.

State lives in a single AppState model. It is changed only through AppStore
action methods, and subscribers are notified after every action.
"""
import logging
from typing import Callable, List, Optional

from pydantic import BaseModel

from client.image_utils import generate_id, now_ms
from models.history import BrushStroke, Edit, Generation, Project

logger = logging.getLogger(__name__)

Listener = Callable[["AppState"], None]


class AppState(BaseModel):
    current_project: Optional[Project] = None

    canvas_image: Optional[str] = None  # data URI shown on the canvas
    brush_strokes: List[BrushStroke] = []
    edit_reference_images: List[str] = []  # data URIs

    selected_generation_id: Optional[str] = None
    selected_edit_id: Optional[str] = None

    seed: Optional[int] = None
    temperature: float = 0.7

    is_generating: bool = False
    error: Optional[str] = None

    api_key: Optional[str] = None


class AppStore:
    def __init__(self, state: Optional[AppState] = None):
        self.state = state or AppState()
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)

    def _ensure_project(self) -> Project:
        if self.state.current_project is None:
            timestamp = now_ms()
            self.state.current_project = Project(id=generate_id(), created_at=timestamp, updated_at=timestamp)
        return self.state.current_project

    # History

    def set_current_project(self, project: Optional[Project]) -> None:
        self.state.current_project = project
        self._notify()

    def add_generation(self, generation: Generation) -> None:
        project = self._ensure_project()
        project.generations.append(generation)
        project.updated_at = now_ms()
        self._notify()

    def add_edit(self, edit: Edit) -> None:
        project = self._ensure_project()
        project.edits.append(edit)
        project.updated_at = now_ms()
        self._notify()

    def latest_generation_id(self) -> Optional[str]:
        project = self.state.current_project
        if project and project.generations:
            return project.generations[-1].id
        return None

    def select_generation(self, generation_id: Optional[str]) -> None:
        self.state.selected_generation_id = generation_id
        self._notify()

    def select_edit(self, edit_id: Optional[str]) -> None:
        self.state.selected_edit_id = edit_id
        self._notify()

    # Canvas

    def set_canvas_image(self, url: Optional[str]) -> None:
        self.state.canvas_image = url
        self._notify()

    def add_brush_stroke(self, stroke: BrushStroke) -> None:
        self.state.brush_strokes.append(stroke)
        self._notify()

    def clear_brush_strokes(self) -> None:
        self.state.brush_strokes = []
        self._notify()

    def add_edit_reference_image(self, url: str) -> None:
        self.state.edit_reference_images.append(url)
        self._notify()

    def remove_edit_reference_image(self, url: str) -> None:
        self.state.edit_reference_images = [img for img in self.state.edit_reference_images if img != url]
        self._notify()

    def clear_edit_reference_images(self) -> None:
        self.state.edit_reference_images = []
        self._notify()

    # Parameters and status

    def set_seed(self, seed: Optional[int]) -> None:
        self.state.seed = seed
        self._notify()

    def set_temperature(self, temperature: float) -> None:
        self.state.temperature = temperature
        self._notify()

    def set_is_generating(self, is_generating: bool) -> None:
        self.state.is_generating = is_generating
        self._notify()

    def set_error(self, error: Optional[str]) -> None:
        self.state.error = error
        self._notify()

    def set_api_key(self, api_key: Optional[str]) -> None:
        self.state.api_key = api_key or None
        self._notify()

    def reset(self) -> None:
        """Start over with an empty state, keeping the API key"""
        self.state = AppState(api_key=self.state.api_key)
        self._notify()
