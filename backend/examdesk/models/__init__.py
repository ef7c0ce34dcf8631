from examdesk.models.activity_log import ActivityLog  # noqa: F401
from examdesk.models.exam import Exam, ExamSchedule  # noqa: F401
from examdesk.models.invigilation import DutySwap, DutyType, InvigilationDuty, SwapStatus  # noqa: F401
from examdesk.models.room import Room  # noqa: F401
from examdesk.models.seating import SeatingArrangement, SeatingStatus  # noqa: F401
from examdesk.models.student import Student  # noqa: F401
from examdesk.models.teacher import Teacher, TeacherAvailability  # noqa: F401
