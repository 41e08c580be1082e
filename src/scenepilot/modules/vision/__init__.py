from .identify import Identify
from .protocols import Matcher, MatchOutcome
from .utils import ImageLike, crop, is_empty, load_image

__all__ = [
    "Identify",
    "Matcher",
    "MatchOutcome",
    "ImageLike",
    "crop",
    "is_empty",
    "load_image",
]
