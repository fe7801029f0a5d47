from .ivp import integrate, integrate_dae, trajectory_table
from .base import FixedStepSolver, SecondOrderSolver
from .bdf import BDF
from .betsch import Betsch, consistent_initial_conditions
from .leapfrog import Leapfrog
from .common import (MassMatrix, IdentityMass, ConstantMass, TimeVaryingMass,
                     StateWeakMass, StateStrongMass, mass_matrix, Constraints,
                     discrete_gradient)
from .nonlinear import (ConvergenceError, NonlinearSolver, NewtonSolver,
                        LevenbergMarquardtSolver)
from .options import FixedStepOptions, OdeOptions, DaeOptions
from .progress import ProgressBar
