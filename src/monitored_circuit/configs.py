"""Configuration classes for monitored brickwork circuits."""
from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import List, Sequence, Union

from .cliffords import UNITARY_FAMILIES
from .states import STATE_TYPES


def measurement_probabilities(p: Union[float, Sequence[float]], L: int) -> List[float]:
    """Expand ``p`` (scalar or length-L vector) to one probability per qubit."""
    if isinstance(p, Real):
        probabilities = [float(p)] * L
    else:
        probabilities = [float(x) for x in p]
        if len(probabilities) != L:
            raise ValueError(
                f"probability vector must have length L={L}, got {len(probabilities)}"
            )
    for x in probabilities:
        if not 0.0 <= x <= 1.0:
            raise ValueError(f"Measurement probability must be between 0 and 1, got {x}")
    return probabilities


@dataclass
class CircuitConfig:
    """Parameters of a thermalize-then-measure brickwork run.

    p:
        scalar measurement probability, or one probability per qubit
        (quenched disorder in the measurement rate)
    t_therm / t_meas:
        layers run without / with observable extraction
    """
    L: int = 16
    p: Union[float, Sequence[float]] = 0.1
    is_pbc: bool = True
    initial_state: str = "product_0"
    unitaries_type: str = "cliffords"
    measure_first_qubit: bool = True
    t_therm: int = 0
    t_meas: int = 16
    # Also record the tripartite information of the quarter blocks.
    measure_i3: bool = False

    def __post_init__(self) -> None:
        if self.L < 2:
            raise ValueError(f"L must be at least 2, got {self.L}")
        if self.t_therm < 0 or self.t_meas < 0:
            raise ValueError("t_therm and t_meas must be non-negative")
        if self.initial_state not in STATE_TYPES:
            raise ValueError(
                f"Invalid initial_state '{self.initial_state}'. Must be one of {', '.join(STATE_TYPES)}."
            )
        if self.unitaries_type not in UNITARY_FAMILIES:
            raise ValueError(
                f"Invalid unitaries_type '{self.unitaries_type}'. Must be one of {sorted(UNITARY_FAMILIES)}."
            )
        measurement_probabilities(self.p, self.L)

    def probabilities(self) -> List[float]:
        """Per-qubit measurement probabilities."""
        return measurement_probabilities(self.p, self.L)
