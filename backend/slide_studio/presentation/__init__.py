from slide_studio.presentation.settings import PresentationSettings, apply_patch
from slide_studio.presentation.state import PresentationStore

__all__ = ["PresentationSettings", "PresentationStore", "apply_patch"]
