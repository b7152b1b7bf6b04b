"""Prompt construction for model-backed analysis."""

from idea_analysis.entities import (
    AVOID_FOR_NOW,
    CONSIDER_LATER,
    GOOD_ALIGNMENT,
    PRIORITIZE_NOW,
    GoalContext,
)
from idea_analysis.errors import InvalidRequestError

TASK_MARKER = "TASK:"

SYSTEM_PROMPT = (
    "You are an expert at analyzing ideas against personal goals and values. "
    "Provide detailed, structured analysis in JSON format."
)

PROMPT_TEMPLATE = """You are an expert at evaluating ideas against personal goals and values.

GOALS & VALUES:
{context}

IDEA TO EVALUATE:
{idea}

TASK:
Analyze this idea and provide a detailed scoring breakdown based on the goals above.

SCORING FRAMEWORK:

1. Mission Alignment (0-4.0 points total - 40%):
   - Domain Expertise (0-1.2): Does this leverage existing skills and domain knowledge?
   - AI Alignment (0-1.5): How central is AI to this idea?
   - Execution Support (0-0.8): Can this be delivered quickly?
   - Revenue Potential (0-0.5): Is there a clear path to revenue?

2. Anti-Challenge Patterns (0-3.5 points total - 35%):
   - Avoid Context-Switching (0-1.2): Does this use your current stack?
   - Rapid Prototyping (0-1.0): Can you build an MVP quickly?
   - Accountability (0-0.8): Is there external accountability?
   - Income Anxiety (0-0.5): How quickly can this generate revenue?

3. Strategic Fit (0-2.5 points total - 25%):
   - Stack Compatibility (0-1.0): Enables flow state with your stack?
   - Shipping Habit (0-0.8): Creates reusable systems/code?
   - Public Accountability (0-0.4): Can you validate quickly?
   - Revenue Testing (0-0.3): Is this scalable (SaaS vs consulting)?

RESPONSE FORMAT:
Respond with valid JSON in this exact format:
{{
  "scores": {{
    "mission_alignment": 2.5,
    "anti_challenge": 2.0,
    "strategic_fit": 1.5
  }},
  "final_score": 6.0,
  "recommendation": "{consider_later}",
  "explanations": {{
    "mission_alignment": "explanation here",
    "anti_challenge": "explanation here",
    "strategic_fit": "explanation here"
  }}
}}

IMPORTANT:
- Provide ONLY the JSON response, no additional text
- Ensure all scores are within their valid ranges
- final_score should be the sum of the three category scores
- recommendation should be one of: {labels}
"""


def format_goal_context(context: GoalContext) -> str:
    """Render a goal context as markdown-ish sections, skipping empty ones."""
    sections: list[str] = []

    if context.goals:
        sections.append("## Goals:\n" + "\n".join(f"- {goal}" for goal in context.goals))
    if context.strategies:
        sections.append("## Strategies:\n" + "\n".join(f"- {strategy}" for strategy in context.strategies))
    if context.primary_stack or context.secondary_stack:
        lines = ["## Tech Stack:"]
        if context.primary_stack:
            lines.append(f"- Primary: {', '.join(context.primary_stack)}")
        if context.secondary_stack:
            lines.append(f"- Secondary: {', '.join(context.secondary_stack)}")
        sections.append("\n".join(lines))
    if context.failure_patterns:
        sections.append(
            "## Failure Patterns to Avoid:\n" + "\n".join(f"- {pattern}" for pattern in context.failure_patterns)
        )

    return "\n\n".join(sections)


def build_analysis_prompt(idea_text: str, context: GoalContext | None) -> str:
    """
    Build the analysis prompt for an idea.

    Args:
        idea_text: The idea to evaluate.
        context: The caller's goal context.

    Returns:
        The full prompt text, with a ``TASK:`` marker separating the
        background from the instructions.

    Raises:
        InvalidRequestError: If the idea text or the context is missing.
    """
    if not idea_text or not idea_text.strip():
        raise InvalidRequestError("idea text is required")
    if context is None:
        raise InvalidRequestError("goal context is required")

    labels = ", ".join(f'"{label}"' for label in (PRIORITIZE_NOW, GOOD_ALIGNMENT, CONSIDER_LATER, AVOID_FOR_NOW))
    return PROMPT_TEMPLATE.format(
        context=format_goal_context(context),
        idea=idea_text.strip(),
        consider_later=CONSIDER_LATER,
        labels=labels,
    )


def split_system_prompt(prompt: str) -> tuple[str, str]:
    """
    Split a prompt at its last ``TASK:`` line.

    Returns:
        ``(system, user)``. Without a marker the system part is empty and the
        whole prompt is the user part.
    """
    # The template marker line always comes after the goals and the idea.
    index = prompt.rfind(f"\n{TASK_MARKER}\n")
    if index == -1:
        return "", prompt
    return prompt[:index].strip(), prompt[index:].strip()
