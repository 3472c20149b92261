from dataclasses import dataclass, asdict


@dataclass
class Notice:
    """User-visible notice, rendered by the client as a toast"""
    title: str
    description: str
    variant: str = "default"

    def to_dict(self) -> dict:
        return asdict(self)


class AppException(Exception):
    def __init__(self, status_code: int, detail):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class GatewayError(AppException):
    def __init__(self, detail: str, status_code: int = 500):
        super().__init__(status_code, detail)


class RecordNotFound(GatewayError):
    def __init__(self, table: str, row_id):
        super().__init__(f"{table} record {row_id} not found", status_code=404)
        self.table = table
        self.row_id = row_id


class AdvisorError(Exception):
    """An advice provider failed to produce text"""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(AdvisorError):
    """A provider is missing its key or endpoint"""


class AdviceUnavailable(AppException):
    def __init__(self, notice: Notice):
        super().__init__(503, notice.to_dict())
        self.notice = notice
