from .analytics import AnalyticsSink, LoggingAnalytics, SwapRecord
from .engine import (
    SwapExecutor,
    SwapFailureKind,
    SwapOutcome,
    SwapState,
    classify_failure,
)
from .errors import ExecutionError, PlanningError, StepBuildError, WrongNetwork
from .planner import ExecutionPlan, ExecutionPlanner, StepKind, SwapStep

__all__ = [
    "AnalyticsSink",
    "LoggingAnalytics",
    "SwapRecord",
    "SwapExecutor",
    "SwapFailureKind",
    "SwapOutcome",
    "SwapState",
    "classify_failure",
    "ExecutionError",
    "PlanningError",
    "StepBuildError",
    "WrongNetwork",
    "ExecutionPlan",
    "ExecutionPlanner",
    "StepKind",
    "SwapStep",
]
