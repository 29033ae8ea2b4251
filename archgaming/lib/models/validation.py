from dataclasses import dataclass
from enum import Enum


class ValidationStatus(Enum):
	Ok = 'OK'
	Warn = 'WARN'
	Fail = 'FAIL'
	Info = 'INFO'


@dataclass(frozen=True)
class ValidationResult:
	label: str
	status: ValidationStatus
	note: str = ''

	def table_data(self) -> dict[str, str]:
		return {
			'check': self.label,
			'status': self.status.value,
			'note': self.note,
		}
