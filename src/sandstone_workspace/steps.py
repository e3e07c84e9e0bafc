"""Ordered execution of guarded workspace steps.

Each command is a list of steps run in sequence. A step may carry a guard
that inspects the outcomes of the steps before it; a step whose guard
returns False is recorded as skipped. A step may also report itself as
skipped when it finds nothing to do, which lets the guards of later steps
skip the dependent work. Execution stops at the first failed step.
"""

import inspect
import typing

import pydantic

from sandstone_workspace import errors, mixins, models

StepCallable = typing.Callable[
    [], typing.Awaitable[models.StepOutcome | bool | None]
]
Guard = typing.Callable[[models.StepResult], bool | typing.Awaitable[bool]]


class Step(pydantic.BaseModel):
    """A named unit of work.

    ``run`` returns a ``StepOutcome`` or a boolean success flag; ``None`` is
    treated as completed.
    """

    model_config = pydantic.ConfigDict(frozen=True)

    name: str
    run: StepCallable
    guard: Guard | None = None


def after(name: str) -> Guard:
    """Return a guard that allows a step once ``name`` has completed."""

    def guard(result: models.StepResult) -> bool:
        return result.completed(name)

    return guard


def _outcome(value: models.StepOutcome | bool | None) -> models.StepOutcome:
    if isinstance(value, models.StepOutcome):
        return value
    if value is False:
        return models.StepOutcome.failed
    return models.StepOutcome.completed


class StepRunner(mixins.LoggerMixin):
    """Executes steps in order and records their outcomes."""

    async def execute(self, steps: typing.Iterable[Step]) -> models.StepResult:
        result = models.StepResult()
        for step in steps:
            if step.guard is not None:
                allowed = step.guard(result)
                if inspect.isawaitable(allowed):
                    allowed = await allowed
                if not allowed:
                    self.logger.debug('Skipping step %s', step.name)
                    result.outcomes[step.name] = models.StepOutcome.skipped
                    continue
            self.logger.debug('Running step %s', step.name)
            try:
                outcome = _outcome(await step.run())
            except errors.WorkspaceError as exc:
                self.logger.error('%s', exc)
                result.error = str(exc)
                outcome = models.StepOutcome.failed
            result.outcomes[step.name] = outcome
            if outcome == models.StepOutcome.failed:
                self._log_verbose_info('Step %s failed', step.name)
                break
        return result
