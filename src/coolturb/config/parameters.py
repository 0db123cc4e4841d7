"""
Sectioned scalar parameters, as read from a run's input file.

Parameters are addressed by (section, name), e.g. ("problem", "turb_flag").
Values may be stored either typed (YAML/JSON input) or as raw strings
(Athena-style input); the typed getters convert on access.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Union

import yaml


class MissingParameterError(KeyError):
    """Raised when a required parameter is not present in the input."""

    def __init__(self, section: str, name: str):
        self.section = section
        self.name = name
        super().__init__(f"{section}/{name}")

    def __str__(self) -> str:
        return (f"Parameter '{self.name}' not found in section <{self.section}> "
                "of the input file")


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


class ParameterInput:
    """
    Container for input parameters grouped into named sections.

    Parameters
    ----------
    sections : Mapping[str, Mapping[str, Any]], optional
        Initial {section: {name: value}} contents. Copied on construction.

    Examples
    --------
    >>> pin = ParameterInput({"problem": {"turb_flag": 0}})
    >>> pin.get_integer("problem", "turb_flag")
    0
    >>> pin.get_or_add_real("problem", "grav_eps", 0.0)
    0.0
    """

    def __init__(self, sections: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._sections: Dict[str, Dict[str, Any]] = {}
        for section, values in (sections or {}).items():
            if not isinstance(values, Mapping):
                raise ValueError(
                    f"Section <{section}> must map names to values, got {type(values).__name__}"
                )
            self._sections[str(section)] = dict(values)

    @property
    def sections(self) -> Dict[str, Dict[str, Any]]:
        return self._sections

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Deep-enough copy of the contents for serialisation."""
        return {section: dict(values) for section, values in self._sections.items()}

    def does_parameter_exist(self, section: str, name: str) -> bool:
        return name in self._sections.get(section, {})

    def _raw(self, section: str, name: str) -> Any:
        try:
            return self._sections[section][name]
        except KeyError:
            raise MissingParameterError(section, name) from None

    # --- typed getters ---

    def get_real(self, section: str, name: str) -> float:
        value = self._raw(section, name)
        if isinstance(value, bool):
            raise ValueError(f"Parameter {section}/{name} must be a real number, got {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(
                f"Parameter {section}/{name} must be a real number, got {value!r}"
            ) from None

    def get_integer(self, section: str, name: str) -> int:
        value = self._raw(section, name)
        if isinstance(value, bool):
            raise ValueError(f"Parameter {section}/{name} must be an integer, got {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ValueError(f"Parameter {section}/{name} must be an integer, got {value!r}")
        try:
            return int(str(value).strip())
        except ValueError:
            raise ValueError(
                f"Parameter {section}/{name} must be an integer, got {value!r}"
            ) from None

    def get_boolean(self, section: str, name: str) -> bool:
        value = self._raw(section, name)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"Parameter {section}/{name} must be a boolean, got {value!r}")

    def get_string(self, section: str, name: str) -> str:
        return str(self._raw(section, name))

    # --- get-or-add: record defaults so the effective input can be saved ---

    def get_or_add_real(self, section: str, name: str, default: float) -> float:
        if not self.does_parameter_exist(section, name):
            self.set_value(section, name, float(default))
        return self.get_real(section, name)

    def get_or_add_integer(self, section: str, name: str, default: int) -> int:
        if not self.does_parameter_exist(section, name):
            self.set_value(section, name, int(default))
        return self.get_integer(section, name)

    def get_or_add_string(self, section: str, name: str, default: str) -> str:
        if not self.does_parameter_exist(section, name):
            self.set_value(section, name, str(default))
        return self.get_string(section, name)

    def set_value(self, section: str, name: str, value: Any) -> None:
        self._sections.setdefault(section, {})[name] = value

    def set_real(self, section: str, name: str, value: float) -> None:
        self.set_value(section, name, float(value))

    # --- overrides ---

    def apply_overrides(self, overrides: Union[Iterable[str], Mapping[str, Any]]) -> None:
        """
        Apply command-line style overrides.

        Accepts either strings of the form ``"section.name=value"`` (values are
        parsed as YAML scalars; anything YAML leaves as a string, such as
        ``1e6``, is converted later by the typed getters) or a mapping
        ``{"section.name": value}``.
        """
        if isinstance(overrides, Mapping):
            items = list(overrides.items())
        else:
            items = [parse_override(text) for text in overrides]

        for key, value in items:
            section, sep, name = key.partition(".")
            if not sep or not section or not name:
                raise ValueError(f"Override key must look like 'section.name', got '{key}'")
            self.set_value(section, name, value)

    def __contains__(self, section: str) -> bool:
        return section in self._sections

    def __repr__(self) -> str:
        counts = ", ".join(f"{s}: {len(v)}" for s, v in self._sections.items())
        return f"ParameterInput({{{counts}}})"


def parse_override(text: str):
    """Split ``"section.name=value"`` into (key, typed value)."""
    key, sep, raw = text.partition("=")
    if not sep:
        raise ValueError(f"Override must look like 'section.name=value', got '{text}'")
    value = yaml.safe_load(raw) if raw.strip() else ""
    return key.strip(), value
