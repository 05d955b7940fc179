"""
Key/value configuration read from command line arguments and text files.

Arguments look like ``-key=value`` or ``--key=value``; a configuration file
holds one ``key=value`` pair per line. Keys are case-insensitive and stored
without their leading dashes. A key may carry a ``section:`` prefix, e.g.
``--telegram:proxy=true``.
"""

from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping

from apphost.utils.errors import ConfigurationError
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _normalize_key(key: str) -> str:
    return key.strip().lstrip("-").lower()


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"'{value}' is not a boolean value")


class TextFileConfiguration:
    """Merged key/value configuration.

    Every key keeps the list of values it was given, in order; lookups return
    the last one.
    """

    def __init__(self, args: Iterable[str] | None = None):
        self._args: dict[str, list[str]] = {}
        for arg in args or []:
            self._add_argument(arg)

    @classmethod
    def from_text(cls, data: str) -> "TextFileConfiguration":
        """Parse the content of a configuration file.

        Raises:
            ConfigurationError: If a line has no value
        """
        configuration = cls()
        for line_number, raw_line in enumerate(data.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            # Split on the first "=" only, values may contain more of them.
            key, sep, value = line.partition("=")
            if not sep:
                raise ConfigurationError(
                    f"Line {line_number}: \"{raw_line}\" : No value is set",
                    context={"line": line_number},
                )
            configuration.add(key, value.strip())
        return configuration

    @classmethod
    def from_file(cls, path: Path) -> "TextFileConfiguration":
        """Read and parse a configuration file."""
        if not path.exists():
            raise ConfigurationError(f"Configuration file does not exist at {path}.")
        logger.debug(f"Reading configuration file '{path}'")
        return cls.from_text(path.read_text(encoding="utf-8"))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "TextFileConfiguration":
        configuration = cls()
        for key, value in values.items():
            configuration.add(key, "" if value is None else str(value))
        return configuration

    def _add_argument(self, arg: str) -> None:
        if not arg.startswith("-"):
            logger.debug(f"Ignoring positional argument '{arg}'")
            return
        key, sep, value = arg.partition("=")
        # A bare flag such as "-testnet" means "1".
        self.add(key, value.strip() if sep else "1")

    def add(self, key: str, value: str) -> None:
        """Append a value to a key."""
        self._args.setdefault(_normalize_key(key), []).append(value)

    def set(self, key: str, value: str | None) -> None:
        """Replace all values of a key; None removes the key."""
        normalized = _normalize_key(key)
        if value is None:
            self._args.pop(normalized, None)
        else:
            self._args[normalized] = [value]

    def get_all(self, key: str) -> list[str]:
        """Return every value given for a key."""
        return list(self._args.get(_normalize_key(key), []))

    def get_or_default(
        self,
        key: str,
        default: Any = None,
        cast: Callable[[str], Any] | type = str
    ) -> Any:
        """Return the last value of a key converted with ``cast``.

        Raises:
            ConfigurationError: If the value cannot be converted
        """
        values = self._args.get(_normalize_key(key))
        if not values:
            return default

        raw = values[-1]
        converter = _to_bool if cast is bool else cast
        try:
            value = converter(raw)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Error parsing the value '{raw}' of setting '{key}'",
                context={"key": key, "value": raw},
            ) from e

        logger.debug(f"{key} set to {value}")
        return value

    def get_section(self, section: str) -> dict[str, str]:
        """Return the keys of a ``section:`` prefix without the prefix."""
        prefix = _normalize_key(section) + ":"
        return {
            key[len(prefix):]: values[-1]
            for key, values in self._args.items()
            if key.startswith(prefix) and values
        }

    def merge_into(self, destination: "TextFileConfiguration") -> None:
        """Copy keys missing from ``destination`` into it."""
        for key, values in self._args.items():
            if key not in destination._args:
                destination._args[key] = list(values)

    def as_dict(self) -> dict[str, str]:
        """Return every key with its last value."""
        return {key: values[-1] for key, values in self._args.items() if values}

    def __getitem__(self, key: str) -> str | None:
        values = self._args.get(_normalize_key(key))
        return values[-1] if values else None

    def __setitem__(self, key: str, value: str | None) -> None:
        self.set(key, value)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _normalize_key(key) in self._args

    def __iter__(self) -> Iterator[str]:
        return iter(self._args)

    def __len__(self) -> int:
        return len(self._args)
