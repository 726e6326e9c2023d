from .links import LinkRewriter, build_link_targets, rewrite_links
from .templating import AudienceMarkupError, filter_audience
from .variables import SubstitutionResult, substitute

__all__ = [
    "LinkRewriter",
    "build_link_targets",
    "rewrite_links",
    "AudienceMarkupError",
    "filter_audience",
    "SubstitutionResult",
    "substitute",
]
