from .model import PresetScope
from .service import PresetService

__all__ = ["PresetScope", "PresetService"]
