"""
Theme information.

Themes live under a base directory, one directory per theme with a
theme.yaml describing it. A theme may extend a parent theme ("extends") and
include mixins ("mixins"), each with a mixin.yaml in its own directory.
Configuration is merged from the active theme up to the root of the chain.

Dependencies: yaml, finna.core.theme.merge
System role: Theme inheritance and asset lookup
"""

import copy
import glob
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from finna.core.cache import CacheStorage
from finna.core.theme.merge import merge_recursive

logger = logging.getLogger(__name__)

# Return type for find_containing_theme
RETURN_ALL_DETAILS = "all"


class ThemeNotFoundError(Exception):
    """Raised when a theme has no configuration file."""


class ThemeInfo:
    """Resolves theme inheritance chains."""

    def __init__(self, base_dir: str | Path, safe_theme: str) -> None:
        """
        Args:
            base_dir: Directory containing the themes
            safe_theme: Theme used until set_theme is called
        """
        self.base_dir = str(base_dir)
        self.safe_theme = safe_theme
        self._current_theme = safe_theme
        self._all_theme_info: dict[str, dict] | None = None
        self._cache: CacheStorage | None = None

    def set_cache(self, cache: CacheStorage) -> None:
        """Cache merged configuration in any object offering get_item/set_item."""
        self._cache = cache

    def get_base_dir(self) -> str:
        return self.base_dir

    def _theme_config_path(self, theme: str) -> str:
        return os.path.join(self.base_dir, theme, "theme.yaml")

    def _mixin_config_path(self, mixin: str) -> str:
        return os.path.join(self.base_dir, mixin, "mixin.yaml")

    def set_theme(self, theme: str) -> None:
        """
        Activate a theme.

        Raises:
            ThemeNotFoundError: If the theme has no theme.yaml; nothing changes
        """
        if not os.path.exists(self._theme_config_path(theme)):
            raise ThemeNotFoundError(f"Cannot load theme: {theme}")
        if theme != self._current_theme:
            self._all_theme_info = None
            self._current_theme = theme

    def get_theme(self) -> str:
        return self._current_theme

    @staticmethod
    def _load_yaml(path: str) -> dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _load_theme_config(self, theme: str, info: dict[str, dict]) -> None:
        info[theme] = self._load_yaml(self._theme_config_path(theme))
        for mixin in info[theme].get("mixins") or []:
            info[mixin] = self._load_yaml(self._mixin_config_path(mixin))

    def get_theme_info(self) -> dict[str, dict]:
        """
        Get the configuration of every theme and mixin in the active chain.

        Returns:
            dict: Theme or mixin name -> its configuration
        """
        if self._all_theme_info is None:
            info: dict[str, dict] = {}
            theme = self.get_theme()
            while theme:
                self._load_theme_config(theme, info)
                theme = info[theme].get("extends")
            self._all_theme_info = info
        return self._all_theme_info

    def _theme_chain(self) -> list[list[str]]:
        """Themes from child to parent, each followed by its mixins."""
        info = self.get_theme_info()
        chain = []
        theme = self.get_theme()
        while theme:
            chain.append([theme, *(info[theme].get("mixins") or [])])
            theme = info[theme].get("extends")
        return chain

    def get_merged_config(self, key: str = "") -> Any:
        """
        Get configuration merged over the whole theme chain.

        Args:
            key: Configuration key to merge; empty merges everything

        Returns:
            Merged value (empty dict when nothing defines the key)
        """
        info = self.get_theme_info()
        cache_key = f"{self.get_theme()}_{key}"
        if self._cache is not None:
            cached = self._cache.get_item(cache_key)
            if cached is not None:
                return cached

        merged: Any = None
        for theme_set in self._theme_chain():
            for theme in theme_set:
                config = info.get(theme)
                if config is None:
                    continue
                if key and config.get(key) is None:
                    continue
                current = copy.deepcopy(config[key] if key else config)
                merged = current if merged is None else merge_recursive(current, merged)
        if merged is None:
            merged = {}

        if self._cache is not None:
            self._cache.set_item(cache_key, merged)
        return merged

    def find_containing_theme(
        self,
        relative_path: str | list[str],
        return_type: bool | str = False,
    ) -> str | dict[str, str] | None:
        """
        Find the first theme in the chain containing a file.

        Args:
            relative_path: Path (or paths) relative to a theme directory
            return_type: False for the theme name, True for the full path,
                RETURN_ALL_DETAILS for {"path", "theme", "relativePath"}

        Returns:
            Requested detail, or None if no theme contains the file
        """
        paths = relative_path if isinstance(relative_path, list) else [relative_path]
        for theme_set in self._theme_chain():
            for theme in theme_set:
                for current in paths:
                    path = os.path.join(self.base_dir, theme, current)
                    if not os.path.exists(path):
                        continue
                    if return_type == RETURN_ALL_DETAILS:
                        return {"path": path, "theme": theme, "relativePath": current}
                    return path if return_type else theme
        return None

    def find_in_themes(self, patterns: str | list[str]) -> list[dict[str, str]]:
        """
        Find files matching glob patterns in all themes of the chain.

        A file in a child theme replaces the file with the same relative path
        in its parents.

        Returns:
            list[dict]: {"theme", "file", "relativeFile"} in base-theme-first order
        """
        patterns = [patterns] if isinstance(patterns, str) else patterns
        themes = [theme for theme_set in self._theme_chain() for theme in theme_set]

        results: dict[str, dict[str, str]] = {}
        for theme in reversed(themes):
            theme_path = os.path.join(self.base_dir, theme) + os.sep
            for pattern in patterns:
                for file in sorted(glob.glob(theme_path + pattern)):
                    if os.path.isdir(file):
                        continue
                    relative_file = file[len(theme_path):]
                    results[relative_file] = {
                        "theme": theme,
                        "file": file,
                        "relativeFile": relative_file,
                    }
        return list(results.values())
