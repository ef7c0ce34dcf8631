class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when an assignment engine cannot start because its inputs are unusable."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class GenerationInProgressError(AppError):
    """Raised when an auto-generation for the same exam schedule is already running."""
    def __init__(self, kind: str, exam_schedule_id: int):
        super().__init__(
            f"A {kind} generation for exam schedule {exam_schedule_id} is already running",
            status_code=409,
            details={"kind": kind, "exam_schedule_id": exam_schedule_id},
        )
