from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager, ExitStack
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from .exceptions import (
	DiskError,
	PackageError,
	PrivilegeError,
	RequirementError,
	ServiceException,
	StepError,
	SysCallError,
	UserAbort,
)
from .output import FormattedOutput, debug, error, info, warn

T = TypeVar('T')

# failures a step may raise that its policy decides on
STEP_ERRORS = (
	DiskError,
	OSError,
	PackageError,
	RequirementError,
	ServiceException,
	StepError,
	SysCallError,
)


class FailurePolicy(Enum):
	Fatal = 'fatal'
	Warn = 'warn'


class SequencerState(Enum):
	NotStarted = 'not started'
	Running = 'running'
	Completed = 'completed'
	Aborted = 'aborted'


class StepOutcome(Enum):
	Done = 'done'
	Skipped = 'skipped'
	Warned = 'warned'
	Failed = 'failed'


@dataclass
class Step:
	name: str
	action: Callable[[], None]
	policy: FailurePolicy = FailurePolicy.Fatal
	precondition: Callable[[], bool] | None = None


@dataclass
class StepRecord:
	name: str
	outcome: StepOutcome
	message: str = ''

	def table_data(self) -> dict[str, str]:
		return {
			'step': self.name,
			'result': self.outcome.value,
			'message': self.message,
		}


class Sequencer:
	"""
	Runs a fixed list of steps in order.

	NotStarted -> Running(i) -> Completed | Aborted(i, reason)

	A failing step with the warn policy is reported and the next step runs,
	a failing fatal step aborts the run. A UserAbort or PrivilegeError
	aborts regardless of the policy. Cleanups registered through ``defer``
	are released when the run ends, however it ends.
	"""

	def __init__(self, name: str, steps: list[Step]):
		self.name = name
		self.steps = steps
		self.state = SequencerState.NotStarted
		self.current: int | None = None
		self.reason: str | None = None
		self.records: list[StepRecord] = []
		self._exit_code = 0
		self._cleanup = ExitStack()

	@property
	def exit_code(self) -> int:
		return self._exit_code

	@property
	def current_step(self) -> Step | None:
		if self.current is None:
			return None
		return self.steps[self.current]

	def defer(self, resource: AbstractContextManager[T]) -> T:
		return self._cleanup.enter_context(resource)

	def callback(self, func: Callable[..., object], *args: object) -> None:
		self._cleanup.callback(func, *args)

	def _abort(self, index: int, reason: str, exit_code: int = 1) -> None:
		self.state = SequencerState.Aborted
		self.current = index
		self.reason = reason
		self._exit_code = exit_code

	def run(self) -> SequencerState:
		if self.state != SequencerState.NotStarted:
			raise RuntimeError(f'{self.name} has already been run')

		with self._cleanup:
			for index, step in enumerate(self.steps):
				self.state = SequencerState.Running
				self.current = index

				if step.precondition is not None and not step.precondition():
					debug(f'Skipping step "{step.name}", precondition not met')
					self.records.append(StepRecord(step.name, StepOutcome.Skipped))
					continue

				info(f'==> {step.name}')

				try:
					step.action()
				except UserAbort as err:
					self.records.append(StepRecord(step.name, StepOutcome.Failed, str(err)))
					self._abort(index, str(err), err.exit_code)
					if err.exit_code:
						error(str(err))
					else:
						info(str(err))
					break
				except PrivilegeError as err:
					self.records.append(StepRecord(step.name, StepOutcome.Failed, str(err)))
					self._abort(index, str(err))
					error(str(err))
					break
				except STEP_ERRORS as err:
					if step.policy == FailurePolicy.Warn:
						warn(f'{step.name} failed, continuing: {err}')
						self.records.append(StepRecord(step.name, StepOutcome.Warned, str(err)))
						continue

					self.records.append(StepRecord(step.name, StepOutcome.Failed, str(err)))
					self._abort(index, str(err))
					error(f'{step.name} failed: {err}')
					break

				self.records.append(StepRecord(step.name, StepOutcome.Done))
			else:
				self.state = SequencerState.Completed
				self.current = None

		debug(f'{self.name} finished in state {self.state.value}')
		return self.state

	def summary(self) -> str:
		return FormattedOutput.as_table(self.records)
