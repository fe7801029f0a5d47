from .common import (CableProperties, InfeasibleCableError, GRAVITY, N_POINTS,
                     cable_properties)
from .catenary import cable_shape_catenary, catenary_shape, catenary_position
from .finite_segment import cable_shape_finite_segment, segment_forces
from .pulley import cable_shape_pulley
from .simple import cable_shape_simple
from .shape import solve_cable_shape
