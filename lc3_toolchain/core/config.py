"""
Configuration Module

Style settings for the formatter and the linter, and the loading of those
settings from TOML files.

Both styles are immutable values. They are built from plain mappings whose
keys use the kebab-case spelling found in the configuration files
(``indent-instruction``); missing keys keep their defaults.

Configuration files are discovered by walking from a start directory up
through its parents:

- ``lc3-format.toml`` with a ``[format-style]`` table
- ``lc3-lint.toml`` with a ``[lint-style]`` table
"""

import logging
import tomllib
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar, Union

from .errors import ConfigError

logger = logging.getLogger(__name__)

FORMAT_CONFIG_FILE = "lc3-format.toml"
LINT_CONFIG_FILE = "lc3-lint.toml"

S = TypeVar('S', bound='StyleConfig')


class CaseStyle(Enum):
    """Supported identifier casing conventions."""
    LOWER_CAMEL_CASE = "LowerCamelCase"
    UPPER_CAMEL_CASE = "UpperCamelCase"
    SNAKE_CASE = "SnakeCase"
    SCREAMING_SNAKE_CASE = "ScreamingSnakeCase"

    @classmethod
    def parse(cls, value: str) -> 'CaseStyle':
        """
        Look up a convention by name, ignoring case and separators.

        ``ScreamingSnakeCase``, ``screaming-snake-case`` and
        ``SCREAMING_SNAKE_CASE`` all resolve to the same member.
        """
        wanted = value.replace('-', '').replace('_', '').lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        raise ConfigError(
            f"Unknown case style '{value}', expected one of: {', '.join(m.value for m in cls)}"
        )


class StyleConfig:
    """Mapping and TOML conversions shared by the style dataclasses."""

    SECTION: ClassVar[str] = ""
    FILENAME: ClassVar[str] = ""

    @classmethod
    def from_mapping(cls: Type[S], mapping: Mapping[str, Any]) -> S:
        """
        Build a style from a mapping of option names to values.

        Args:
            mapping: Keys in kebab-case (snake_case is accepted too)

        Returns:
            A new style; options absent from the mapping keep their defaults

        Raises:
            ConfigError: If a value has the wrong type or is negative
        """
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, value in mapping.items():
            name = str(key).replace('-', '_')
            if name not in known:
                logger.warning(f"Ignoring unknown option '{key}' in [{cls.SECTION}]")
                continue

            default = known[name].default
            option = name.replace('_', '-')
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise ConfigError(f"Option '{option}' must be true or false, got {value!r}", option)
            elif isinstance(default, int):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ConfigError(f"Option '{option}' must be an integer, got {value!r}", option)
                if value < 0:
                    raise ConfigError(f"Option '{option}' must not be negative, got {value}", option)
            elif isinstance(default, CaseStyle):
                if not isinstance(value, (str, CaseStyle)):
                    raise ConfigError(f"Option '{option}' must be a case style name, got {value!r}", option)
                if isinstance(value, str):
                    try:
                        value = CaseStyle.parse(value)
                    except ConfigError as e:
                        raise ConfigError(f"Option '{option}': {e}", option) from e
            values[name] = value

        return cls(**values)

    def to_mapping(self) -> Dict[str, Any]:
        """Options keyed by their kebab-case names, enums as their string values."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name.replace('_', '-')] = value.value if isinstance(value, Enum) else value
        return result

    def to_toml(self) -> str:
        """Render the style as the configuration file table it would be read from."""
        lines = [f"[{self.SECTION}]"]
        for key, value in self.to_mapping().items():
            if isinstance(value, bool):
                rendered = "true" if value else "false"
            elif isinstance(value, int):
                rendered = str(value)
            else:
                rendered = f'"{value}"'
            lines.append(f"{key} = {rendered}")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class FormatStyle(StyleConfig):
    """
    Formatter settings.

    Indentation and spacing values are counts of spaces, except the
    ``space_from_*`` options, which count blank lines.
    """
    SECTION: ClassVar[str] = "format-style"
    FILENAME: ClassVar[str] = FORMAT_CONFIG_FILE

    indent_directive: int = 3
    indent_instruction: int = 4
    indent_label: int = 0
    indent_min_comment_from_block: int = 0
    space_block_to_comment: int = 1
    space_comment_stick_to_body: int = 0
    space_from_label_block: int = 1
    space_from_start_end_block: int = 1
    colon_after_label: bool = True
    fixed_body_comment_indent: bool = True
    directive_label_wrap: bool = True


@dataclass(frozen=True)
class LintStyle(StyleConfig):
    """Linter settings."""
    SECTION: ClassVar[str] = "lint-style"
    FILENAME: ClassVar[str] = LINT_CONFIG_FILE

    colon_after_label: bool = False
    label_style: CaseStyle = CaseStyle.SCREAMING_SNAKE_CASE
    instruction_style: CaseStyle = CaseStyle.SCREAMING_SNAKE_CASE
    directive_style: CaseStyle = CaseStyle.SCREAMING_SNAKE_CASE


def find_config_file(filename: str, start: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Search ``start`` and each of its parents for ``filename``.

    Args:
        filename: Configuration file name to look for
        start: File or directory to begin from (defaults to the current directory)

    Returns:
        Path of the nearest matching file, or None
    """
    directory = Path(start) if start is not None else Path.cwd()
    directory = directory.resolve()
    if not directory.is_dir():
        directory = directory.parent

    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / filename
        if candidate.is_file():
            logger.debug(f"Found configuration file {candidate}")
            return candidate
    return None


def load_style(style_cls: Type[S],
               config_path: Optional[Union[str, Path]] = None,
               start: Optional[Union[str, Path]] = None) -> S:
    """
    Resolve a style from the file system.

    Args:
        style_cls: FormatStyle or LintStyle
        config_path: Explicit configuration file, or a directory to search from
        start: Where discovery begins when no explicit path is given

    Returns:
        The configured style, or the defaults when no usable file is found
    """
    if config_path is not None:
        explicit = Path(config_path)
        path = find_config_file(style_cls.FILENAME, explicit) if explicit.is_dir() else explicit
        if path is None or not path.is_file():
            logger.warning(f"Configuration file not found at {config_path}, using default style")
            return style_cls()
    else:
        path = find_config_file(style_cls.FILENAME, start)
        if path is None:
            logger.debug(f"No {style_cls.FILENAME} found, using default style")
            return style_cls()

    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to read {path}: {e}. Using default style")
        return style_cls()

    table = data.get(style_cls.SECTION, {})
    if not isinstance(table, dict):
        logger.warning(f"[{style_cls.SECTION}] in {path} is not a table. Using default style")
        return style_cls()

    try:
        style = style_cls.from_mapping(table)
    except ConfigError as e:
        logger.warning(f"Invalid configuration in {path}: {e}. Using default style")
        return style_cls()

    logger.info(f"Loaded {style_cls.SECTION} from {path}")
    return style


def load_format_style(config_path: Optional[Union[str, Path]] = None,
                      start: Optional[Union[str, Path]] = None) -> FormatStyle:
    """Resolve the formatter style; see :func:`load_style`."""
    return load_style(FormatStyle, config_path, start)


def load_lint_style(config_path: Optional[Union[str, Path]] = None,
                    start: Optional[Union[str, Path]] = None) -> LintStyle:
    """Resolve the linter style; see :func:`load_style`."""
    return load_style(LintStyle, config_path, start)
