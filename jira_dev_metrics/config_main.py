from .calculators.closed_time import AverageClosedTimeCalculator
from .calculators.development_progress import DevelopmentProgressCalculator
from .calculators.issue_summary import (
    HeatMapCalculator,
    IssueTimeCalculator,
    IssueTypesCalculator,
    ProjectInfoCalculator,
    SprintActivityCalculator,
)
from .calculators.throughput import ThroughputCalculator
from .calculators.transition_details import TransitionDetailsCalculator

CALCULATORS = (
    ProjectInfoCalculator,
    DevelopmentProgressCalculator,
    IssueTimeCalculator,
    TransitionDetailsCalculator,
    ThroughputCalculator,
    AverageClosedTimeCalculator,
    IssueTypesCalculator,
    HeatMapCalculator,
    SprintActivityCalculator,
)
