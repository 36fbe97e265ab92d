"""Theme inheritance."""

from finna.core.theme.merge import merge_recursive
from finna.core.theme.theme_info import RETURN_ALL_DETAILS, ThemeInfo, ThemeNotFoundError

__all__ = ["RETURN_ALL_DETAILS", "ThemeInfo", "ThemeNotFoundError", "merge_recursive"]
