"""Central configuration helper for the knowledge-base engine."""

import logging
import math
import os

_TRUE_VALUES = ("true", "1", "yes")


class HelperConfig:
    """Typed access to the environment variables that configure the engine.

    Keys are case-insensitive. An unset or empty variable falls back to the
    given default; without a default it is a configuration error.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str, has_default: bool) -> tuple[str, str | None]:
        """Return the normalised key and its stripped value (None when unset or empty).

        Raises:
            ValueError: If the variable is unset and the caller has no default.
        """
        key = key.upper()
        raw = (os.getenv(key) or "").strip() or None
        if raw is None and not has_default:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return key, raw

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string environment variable.

        Args:
            key (str): Environment variable name.
            default (str | None): Fallback when the variable is unset.

        Returns:
            str: The stripped value or the default.

        Raises:
            ValueError: If the variable is unset and no default is provided.
        """
        _, raw = self._read_raw(key, default is not None)
        return raw if raw is not None else default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric environment variable.

        Whole values come back as int ("15", "1e3", "2.0"), everything else as float ("0.25").

        Raises:
            ValueError: If the variable is unset without a default, or not a finite number.
        """
        key, raw = self._read_raw(key, default is not None)
        if raw is None:
            return default
        try:
            value = float(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key}' is not a valid number: '{raw}'.")
        if not math.isfinite(value):
            raise ValueError(f"Environment variable '{key}' is not a valid number: '{raw}'.")
        return int(value) if value.is_integer() else value

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean environment variable; "true", "1" and "yes" count as True."""
        _, raw = self._read_raw(key, default is not None)
        if raw is None:
            return default
        return raw.lower() in _TRUE_VALUES

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",") -> list[str]:
        """Read a list environment variable written as "[elem1,elem2,...]".

        Args:
            key (str): Environment variable name.
            default (list[str] | None): Fallback when the variable is unset.
            separator (str): The delimiter between elements.

        Returns:
            list[str]: The stripped, non-empty elements.

        Raises:
            ValueError: If the variable is unset without a default.
            ValueError: If the value is not wrapped in square brackets.
        """
        key, raw = self._read_raw(key, default is not None)
        if raw is None:
            return default
        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(
                f"Environment variable '{key}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'"
            )
        return [v.strip() for v in raw[1:-1].split(separator) if v.strip()]

    def get_logger(self) -> logging.Logger:
        """Return the application logger shared by all components."""
        return self._logger
