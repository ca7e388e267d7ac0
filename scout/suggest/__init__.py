from scout.suggest.loop import SuggestionLoop, SuggestionStats
from scout.suggest.selectors import get_selector

__all__ = ["SuggestionLoop", "SuggestionStats", "get_selector"]
