"""Central configuration helper for the document evaluation service."""

import logging
import os


class HelperConfig:
    """Reads every setting of the service from environment variables.

    Keys are case-insensitive and always looked up in upper case. An empty
    variable counts as unset. Passing ``default=None`` marks a key as required.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    ##########################################
    ################ READERS #################
    ##########################################

    def _read_raw(self, key: str, default_given: bool) -> str | None:
        """Return the raw value of an environment variable or None.

        Args:
            key (str): Environment variable name.
            default_given (bool): Whether the caller can fall back to a default.

        Returns:
            str | None: The stripped raw value, or None if unset.

        Raises:
            ValueError: If the variable is unset and the caller has no default.
        """
        key = key.upper()
        raw = (os.getenv(key) or "").strip() or None
        if raw is None and not default_given:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return raw

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string environment variable.

        Args:
            key (str): Environment variable name (case-insensitive).
            default (str | None): Fallback value if the variable is not set.

        Returns:
            str: The resolved value.

        Raises:
            ValueError: If the variable is not set and no default is provided.
        """
        raw = self._read_raw(key, default_given=default is not None)
        return raw if raw is not None else default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric environment variable.

        Integers stay integers; anything with a decimal point or exponent is
        parsed as float.

        Raises:
            ValueError: If the variable is not set and no default is provided,
                or if the value is not a number.
        """
        raw = self._read_raw(key, default_given=default is not None)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            pass
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean environment variable ("true", "1", "yes" are truthy)."""
        raw = self._read_raw(key, default_given=default is not None)
        if raw is None:
            return default
        return raw.lower() in ("true", "1", "yes")

    def get_list_val(self, key: str, default: list[str] | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list environment variable written as "[elem1,elem2,...]".

        Args:
            key (str): Environment variable name (case-insensitive).
            default (list[str] | None): Fallback value if the variable is not set.
            separator (str): The delimiter between elements.
            element_type (type): The type each element is cast to.

        Returns:
            list: The parsed elements; blank elements are dropped.

        Raises:
            ValueError: If the variable is unset without default, is not
                wrapped in brackets, or contains elements that cannot be cast.
        """
        raw = self._read_raw(key, default_given=default is not None)
        if raw is None:
            return default
        if not raw.startswith("[") or not raw.endswith("]"):
            raise ValueError(f"Environment variable '{key.upper()}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        elements = [v.strip() for v in raw[1:-1].split(separator) if v.strip()]
        try:
            return [element_type(elem) for elem in elements]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' contains invalid elements for type {element_type.__name__}: {e}")

    def get_logger(self) -> logging.Logger:
        """Return the application logger."""
        return self._logger
