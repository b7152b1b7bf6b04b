"""Goal context domain entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GoalContext:
    """The caller's goals and constraints an idea is measured against.

    The resilience layer treats this as opaque; only the prompt builder and
    scoring engines read its fields.

    Attributes:
        goals: Goal descriptions
        strategies: Strategy descriptions
        primary_stack: Technologies used day to day
        secondary_stack: Technologies known but used less
        failure_patterns: Habits the caller wants to avoid
    """

    goals: tuple[str, ...] = field(default_factory=tuple)
    strategies: tuple[str, ...] = field(default_factory=tuple)
    primary_stack: tuple[str, ...] = field(default_factory=tuple)
    secondary_stack: tuple[str, ...] = field(default_factory=tuple)
    failure_patterns: tuple[str, ...] = field(default_factory=tuple)
