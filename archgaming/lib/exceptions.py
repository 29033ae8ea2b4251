class RequirementError(Exception):
	pass


class PrivilegeError(Exception):
	pass


class DiskError(Exception):
	pass


class SysCallError(Exception):
	def __init__(self, message: str, exit_code: int | None = None, worker_log: bytes = b'') -> None:
		super().__init__(message)
		self.message = message
		self.exit_code = exit_code
		self.worker_log = worker_log


class ServiceException(Exception):
	pass


class PackageError(Exception):
	pass


class StepError(Exception):
	pass


class UserAbort(Exception):
	"""
	The user ended the run on purpose, either by declining
	a question that gates the rest of the run or by cancelling a prompt.
	Never recovered from mid-sequence.
	"""

	def __init__(self, message: str, exit_code: int = 1) -> None:
		super().__init__(message)
		self.exit_code = exit_code


class UserCancelled(UserAbort):
	def __init__(self, message: str = 'Operation cancelled by user.') -> None:
		super().__init__(message, exit_code=1)


class DiskWipeDeclined(UserAbort):
	pass
