from ytharvest.models.video import Video
from ytharvest.models.search_config import SearchConfig

__all__ = ["Video", "SearchConfig"]
