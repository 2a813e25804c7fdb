import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern, Union

import yaml


class PatternManager:
    def __init__(self, file_path: Union[str, Path], section_path: Optional[str] = None) -> None:
        """Initialize the pattern manager with a YAML file path.

        Args:
            file_path: Path to the YAML file containing regex patterns
            section_path: Section of the file to load patterns from (supports dot notation for nested keys)

        Raises:
            FileNotFoundError: If the pattern file doesn't exist
            yaml.YAMLError: If the YAML file is malformed
            ValueError: If the section is not found in the patterns file
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Pattern file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                self._pattern_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {file_path}: {e}")

        if section_path:
            self._pattern_data = self._traverse_path(self._pattern_data, section_path)

        # Cache for compiled patterns
        self._regex_cache: Dict[str, Pattern[str]] = {}

    def _traverse_path(self, data: Any, path: str) -> Any:
        """Traverse nested dictionary structure using dot notation."""
        current = data

        try:
            for key in path.split("."):
                current = current[key]
        except (KeyError, TypeError):
            raise ValueError(f"Path '{path}' not found in patterns data")

        return current

    def sections(self) -> List[str]:
        """Names of the pattern lists at the top of the loaded section."""
        if not isinstance(self._pattern_data, dict):
            return []
        return list(self._pattern_data)

    def load_patterns(self, name: str) -> List[str]:
        """Load a list of regex patterns.

        Args:
            name: Key to load patterns from (supports dot notation for nested keys)

        Returns:
            The patterns, in file order

        Raises:
            ValueError: If the key is not found or is not a list of strings
        """
        try:
            patterns = self._traverse_path(self._pattern_data, name)
        except ValueError as e:
            raise ValueError(f"Patterns '{name}' not found: {e}")
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ValueError(f"Patterns '{name}' is not a list of strings")
        return list(patterns)

    def compile(self, name: str) -> Pattern[str]:
        """Compile the patterns under ``name`` into one alternation.

        Raises:
            ValueError: If the patterns are not found
            re.error: If a pattern is not a valid regex
        """
        if name not in self._regex_cache:
            alternatives = "|".join(f"(?:{p})" for p in self.load_patterns(name))
            self._regex_cache[name] = re.compile(alternatives)

        return self._regex_cache[name]
