"""
Validated view of the problem configuration.

ProblemConfig checks the parameters the cooling problem reads before any
block is touched, so that a bad input fails with a readable message instead
of a NaN three sub-steps in. Sections owned by the host (mesh, time, output)
pass through untouched.
"""

import warnings
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from coolturb.config.parameters import ParameterInput
from coolturb.radiation.cooling_source import (
    COOLING_MODES,
    DEFAULT_RELAXATION_TAU,
    DEFAULT_TEMP_GOAL,
    DEGENERATE_POLICIES,
)


class ProblemSection(BaseModel):
    """``<problem>``: initial state, gravity constants and turbulence mode."""

    rho: float = Field(gt=0.0, description="Initial mass density [g/cm³]")
    T: float = Field(gt=0.0, description="Initial temperature [K]")
    four_pi_G: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="4πG for self-gravity (required iff self-gravity is enabled)"
    )
    grav_eps: float = Field(default=0.0, ge=0.0, description="Gravity threshold/softening")
    turb_flag: int = Field(
        ge=0,
        le=3,
        description="0 off, 1 decaying, 2 impulsively driven, 3 continuously driven"
    )

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    @field_validator('turb_flag', mode='before')
    @classmethod
    def validate_turb_flag(cls, v):
        if isinstance(v, bool):
            raise ValueError(f"turb_flag must be an integer 0-3, got {v!r}")
        return v


class HydroSection(BaseModel):
    """``<hydro>``: only the adiabatic index is read here."""

    gamma: float = Field(gt=1.0, description="Adiabatic index")

    model_config = ConfigDict(extra="ignore", validate_assignment=True)


class CoolingSection(BaseModel):
    """``<cooling>``: optional, every field has a default."""

    mode: str = Field(default="radiative_loss", description="Cooling law tag")
    temp_goal: float = Field(default=DEFAULT_TEMP_GOAL, description="Temperature floor [K]")
    tau: float = Field(
        default=DEFAULT_RELAXATION_TAU,
        gt=0.0,
        description="Relaxation timescale (relaxation mode only)"
    )
    degenerate_cells: str = Field(
        default="skip",
        description="Policy for cells with no defined temperature: 'skip' or 'raise'"
    )

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @field_validator('mode')
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v not in COOLING_MODES:
            raise ValueError(f"mode must be one of {list(COOLING_MODES)}, got '{v}'")
        return v

    @field_validator('degenerate_cells')
    @classmethod
    def validate_degenerate_cells(cls, v: str) -> str:
        if v not in DEGENERATE_POLICIES:
            raise ValueError(f"degenerate_cells must be one of {list(DEGENERATE_POLICIES)}, got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_mode_parameters(self):
        if self.mode == "radiative_loss" and 'tau' in self.model_fields_set:
            warnings.warn(
                "cooling.tau is only used by the relaxation law and is ignored "
                "with mode='radiative_loss'."
            )
        return self


class ProblemConfig(BaseModel):
    """
    Configuration for the cooling problem with Pydantic validation.

    Attributes
    ----------
    problem : ProblemSection
    hydro : HydroSection
    cooling : CoolingSection
    """

    problem: ProblemSection
    hydro: HydroSection
    cooling: CoolingSection = Field(default_factory=CoolingSection)

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    @model_validator(mode='after')
    def validate_configuration_consistency(self):
        if self.problem.four_pi_G is None and self.problem.grav_eps != 0.0:
            warnings.warn(
                "problem.grav_eps is set without problem.four_pi_G; it only "
                "takes effect when self-gravity is enabled."
            )
        return self

    @classmethod
    def from_parameters(
        cls,
        pin: ParameterInput,
        self_gravity_enabled: bool = False,
    ) -> 'ProblemConfig':
        """
        Validate the sections of ``pin`` that the cooling problem uses.

        Parameters
        ----------
        pin : ParameterInput
            Loaded parameters.
        self_gravity_enabled : bool
            Host capability; when True, ``problem.four_pi_G`` is required.

        Raises
        ------
        ValueError
            On any invalid or missing parameter (pydantic.ValidationError is a
            ValueError subclass).
        """
        sections = pin.to_dict()
        config = cls(
            problem=sections.get('problem', {}),
            hydro=sections.get('hydro', {}),
            cooling=sections.get('cooling', {}),
        )
        if self_gravity_enabled and config.problem.four_pi_G is None:
            raise ValueError("problem.four_pi_G is required when self-gravity is enabled")
        return config
