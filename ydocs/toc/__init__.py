from .loader import TocLoader, parse_audience
from .model import NavigationManifest, NavigationNode
from .service import TocService

__all__ = ["TocLoader", "TocService", "NavigationManifest", "NavigationNode", "parse_audience"]
