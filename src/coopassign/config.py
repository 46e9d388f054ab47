from dataclasses import dataclass


@dataclass
class EngineConfig:

    ### TIME WINDOWS ###

    # Window length for tasks with a start time but no end time
    # (and no per-task durationMinutes)
    DEFAULT_DURATION_MINUTES: int = 120

    # AM/PM boundary in minutes after midnight
    MIDDAY_MINUTES: int = 12 * 60

    ### TASK STATUS POLICY ###

    # Cancelled tasks are always exempt from conflict detection;
    # postponed ones only when this is set
    EXEMPT_POSTPONED: bool = True

    # Count cancelled/postponed tasks towards workload metrics
    COUNT_INACTIVE_FOR_FAIRNESS: bool = False

    ### FAIRNESS ###

    # Flag counts above mean + FAIRNESS_K * stddev ...
    FAIRNESS_K: float = 1.5
    # ... that are also at least this far above the mean
    FAIRNESS_MIN_GAP: float = 3.0

    ### EXECUTION ###

    # > 1 evaluates constraints on a thread pool
    MAX_WORKERS: int = 1

    def validate(self) -> None:
        """
        Validate the EngineConfig has sensible values before evaluating.
        """
        if self.DEFAULT_DURATION_MINUTES <= 0:
            raise ValueError("DEFAULT_DURATION_MINUTES must be > 0.")
        if not (0 < self.MIDDAY_MINUTES < 24 * 60):
            raise ValueError("MIDDAY_MINUTES must be within (0, 1440).")
        if self.FAIRNESS_K < 0:
            raise ValueError("FAIRNESS_K must be non-negative.")
        if self.FAIRNESS_MIN_GAP < 0:
            raise ValueError("FAIRNESS_MIN_GAP must be non-negative.")
        if self.MAX_WORKERS <= 0:
            raise ValueError("MAX_WORKERS must be > 0.")


cfg = EngineConfig()
