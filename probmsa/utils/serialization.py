"""Serialization utilities for pair-HMM parameters (load and save)."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from probmsa.types.parameters import (
    EmissionParameters,
    ModelParameters,
    TransitionParameters,
)


def _convert_values(value: Any, precision: Optional[int]) -> Any:
    """
    Recursively convert dataclasses/dicts/sequences and optionally round floats.
    """
    if is_dataclass(value):
        return _convert_values(asdict(value), precision)
    if isinstance(value, dict):
        return {key: _convert_values(val, precision) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_convert_values(item, precision) for item in value]
    if isinstance(value, float) and precision is not None:
        return round(value, precision)
    return value


def parameters_to_dict(
    params: ModelParameters, float_precision: Optional[int] = 10
) -> Dict[str, Any]:
    """
    Convert ModelParameters into a plain dictionary suitable for YAML.
    """
    return _convert_values(params, float_precision)


def parameters_from_dict(payload: Dict[str, Any]) -> ModelParameters:
    """Build ModelParameters from a (possibly ``parameters``-wrapped) mapping.

    Raises:
        ValueError: If required sections are missing or values are invalid.
    """
    if not isinstance(payload, dict):
        raise ValueError("Parameter file must contain a mapping.")
    params_dict = payload.get("parameters", payload)
    try:
        transitions_dict = params_dict["transitions"]
        emissions_dict = params_dict["emissions"]
        return ModelParameters(
            transitions=TransitionParameters(
                init_distrib=transitions_dict["init_distrib"],
                gap_open=transitions_dict["gap_open"],
                gap_extend=transitions_dict["gap_extend"],
            ),
            emissions=EmissionParameters(
                alphabet=str(emissions_dict["alphabet"]),
                match=emissions_dict["match"],
                single=emissions_dict["single"],
            ),
        )
    except (KeyError, TypeError) as err:
        raise ValueError(f"Malformed parameter file: {err}") from err


def load_parameters(yaml_path: Union[str, Path]) -> ModelParameters:
    """Load ModelParameters from a YAML file."""
    with Path(yaml_path).open("r", encoding="utf-8") as handle:
        try:
            payload = yaml.safe_load(handle)
        except yaml.YAMLError as err:
            raise ValueError(f"Unable to parse parameter file {yaml_path}: {err}") from err
    return parameters_from_dict(payload)


def save_parameters(
    params: ModelParameters,
    yaml_path: Union[str, Path],
    float_precision: Optional[int] = 10,
) -> None:
    """Write ModelParameters to a YAML file."""
    payload = {"parameters": parameters_to_dict(params, float_precision)}
    with Path(yaml_path).open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, sort_keys=False)


__all__ = [
    "parameters_to_dict",
    "parameters_from_dict",
    "load_parameters",
    "save_parameters",
]
