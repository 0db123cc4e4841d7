"""
Configuration loaders for YAML, JSON and Athena-style input files.

All loaders return a ParameterInput with one dictionary per section:

YAML / JSON::

    problem:
      rho: 1.0e-24
      T: 1.0e+6
      turb_flag: 0
    hydro:
      gamma: 1.6666667

Athena-style (``.athinput`` / ``.in``)::

    <problem>
    rho       = 1.0e-24   # mass density
    T         = 1.0e6
    turb_flag = 0

    <hydro>
    gamma = 1.6666667
"""

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from coolturb.config.parameters import ParameterInput

YAML_SUFFIXES = ('.yaml', '.yml')
JSON_SUFFIXES = ('.json',)
ATHINPUT_SUFFIXES = ('.athinput', '.in')


def load_config(filename: Union[str, Path], **overrides: Mapping[str, Any]) -> ParameterInput:
    """
    Load run parameters from a YAML, JSON or Athena-style input file.

    Parameters
    ----------
    filename : str or Path
        Path to the input file (.yaml, .yml, .json, .athinput or .in).
    **overrides : mapping
        Per-section overrides, e.g. ``problem={"turb_flag": 1}``.

    Returns
    -------
    pin : ParameterInput
        Parameters grouped by section.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the suffix is unsupported or the content is not sectioned.

    Examples
    --------
    >>> pin = load_config("cool_turb.yaml")
    >>> pin = load_config("athinput.cool_turb", problem={"turb_flag": 0})
    """
    filepath = Path(filename)

    if not filepath.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    suffix = filepath.suffix.lower()
    if suffix in YAML_SUFFIXES:
        config_dict = load_yaml(filepath)
    elif suffix in JSON_SUFFIXES:
        config_dict = load_json(filepath)
    elif suffix in ATHINPUT_SUFFIXES or filepath.name.startswith('athinput'):
        config_dict = load_athinput(filepath)
    else:
        raise ValueError(
            f"Unsupported config file format: {suffix}. "
            "Use .yaml, .yml, .json, .athinput or .in"
        )

    for section, values in overrides.items():
        config_dict.setdefault(section, {}).update(values)

    try:
        return config_from_dict(config_dict)
    except ValueError as e:
        raise ValueError(f"Invalid configuration in {filepath}: {e}") from e


def load_yaml(filepath: Path) -> Dict[str, Any]:
    """Load a YAML file into a {section: {name: value}} dictionary."""
    with open(filepath, 'r') as f:
        config_dict = yaml.safe_load(f)

    if config_dict is None:
        config_dict = {}

    return config_dict


def load_json(filepath: Path) -> Dict[str, Any]:
    """Load a JSON file into a {section: {name: value}} dictionary."""
    with open(filepath, 'r') as f:
        config_dict = json.load(f)

    return config_dict


def load_athinput(filepath: Path) -> Dict[str, Dict[str, str]]:
    """
    Parse an Athena-style input file.

    Sections start with ``<name>``; parameters are ``key = value`` lines.
    Everything after ``#`` is a comment. Values are kept as strings and
    converted by the ParameterInput getters.
    """
    config_dict: Dict[str, Dict[str, str]] = {}
    section = None

    with open(filepath, 'r') as f:
        for lineno, raw_line in enumerate(f, start=1):
            line = raw_line.split('#', 1)[0].strip()
            if not line:
                continue

            if line.startswith('<'):
                if not line.endswith('>') or len(line) < 3:
                    raise ValueError(f"{filepath}:{lineno}: malformed section header '{line}'")
                section = line[1:-1].strip()
                config_dict.setdefault(section, {})
                continue

            if section is None:
                raise ValueError(f"{filepath}:{lineno}: parameter outside of any <section>")

            key, sep, value = line.partition('=')
            if not sep or not key.strip():
                raise ValueError(f"{filepath}:{lineno}: expected 'key = value', got '{line}'")
            config_dict[section][key.strip()] = value.strip()

    return config_dict


def save_config(pin: ParameterInput, filename: Union[str, Path]) -> None:
    """
    Save parameters (including any get-or-add defaults) to file.

    Parameters
    ----------
    pin : ParameterInput
        Parameters to save.
    filename : str or Path
        Output path; format chosen from the suffix.
    """
    filepath = Path(filename)
    organized = pin.to_dict()

    suffix = filepath.suffix.lower()
    if suffix in YAML_SUFFIXES:
        with open(filepath, 'w') as f:
            yaml.dump(organized, f, default_flow_style=False, sort_keys=False)
    elif suffix in JSON_SUFFIXES:
        with open(filepath, 'w') as f:
            json.dump(organized, f, indent=2)
    elif suffix in ATHINPUT_SUFFIXES:
        with open(filepath, 'w') as f:
            for section, values in organized.items():
                f.write(f"<{section}>\n")
                for name, value in values.items():
                    f.write(f"{name} = {value}\n")
                f.write("\n")
    else:
        raise ValueError(f"Unsupported output format: {suffix}. Use .yaml, .json or .athinput")


def config_from_dict(config_dict: Dict[str, Any]) -> ParameterInput:
    """
    Create a ParameterInput from a nested dictionary (helper for programmatic use).

    Top-level keys are sections; each must map to a dictionary of scalars.
    """
    if not isinstance(config_dict, Mapping):
        raise ValueError(f"Configuration must be a mapping of sections, got {type(config_dict).__name__}")
    return ParameterInput(config_dict)
