"""Step execution result models."""

import enum

import pydantic


class StepOutcome(enum.StrEnum):
    completed = 'completed'
    skipped = 'skipped'
    failed = 'failed'


class StepResult(pydantic.BaseModel):
    """Outcomes of the steps executed so far, in execution order."""

    outcomes: dict[str, StepOutcome] = pydantic.Field(default_factory=dict)
    error: str | None = None

    @property
    def success(self) -> bool:
        return StepOutcome.failed not in self.outcomes.values()

    def completed(self, name: str) -> bool:
        return self.outcomes.get(name) == StepOutcome.completed
