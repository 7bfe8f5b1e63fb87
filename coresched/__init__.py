"""Multicore CPU scheduling decision engine and event-driven simulator."""

from .engine import NO_CHANGE, SchedulingEngine, initialize
from .errors import SchedulerContractError
from .job import Job, JobSpec
from .policies import Policy
from .simulator import Simulation, SimulationConfig, SimulationResult
from . import workload
from . import metrics
from . import evaluation

__all__ = [
	"NO_CHANGE",
	"SchedulingEngine",
	"initialize",
	"SchedulerContractError",
	"Job",
	"JobSpec",
	"Policy",
	"Simulation",
	"SimulationConfig",
	"SimulationResult",
	"workload",
	"metrics",
	"evaluation",
]
