"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from idea_analysis.entities import GoalContext


class GoalContextPayload(BaseModel):
    """The caller's goals and constraints, as sent over the wire."""

    goals: list[str] = Field(default_factory=list, description="Goal descriptions")
    strategies: list[str] = Field(default_factory=list, description="Strategy descriptions")
    primary_stack: list[str] = Field(default_factory=list, description="Technologies used day to day")
    secondary_stack: list[str] = Field(default_factory=list, description="Technologies known but used less")
    failure_patterns: list[str] = Field(default_factory=list, description="Habits to avoid")

    def to_entity(self) -> GoalContext:
        return GoalContext(
            goals=tuple(self.goals),
            strategies=tuple(self.strategies),
            primary_stack=tuple(self.primary_stack),
            secondary_stack=tuple(self.secondary_stack),
            failure_patterns=tuple(self.failure_patterns),
        )


class AnalyzeRequest(BaseModel):
    """Request DTO for analyzing an idea.

    The handler will convert this to an ``AnalysisRequest`` entity.
    """

    idea: str = Field(..., description="The idea to analyze", min_length=1)
    context: GoalContextPayload | None = Field(
        None,
        description="Goal context; required by every backend that builds a prompt or scores rules",
    )
    provider: str | None = Field(
        None,
        description="Call this registered provider directly instead of the primary with fallback",
    )
