from models.errors import (
    TrainingPlanError,
    NotFoundError,
    ValidationError,
    InvalidTransitionError,
    PersistenceError,
)
from models.curriculum import (
    CompetencyArea,
    CurriculumCatalog,
    CurriculumUnit,
    ExamModality,
    ExamSection,
    ExamType,
    ExaminationTemplate,
    Occupation,
)
from models.plan import (
    ExamResult,
    ExamState,
    Examination,
    ScheduledUnit,
    TrainingPlan,
    UnitStatus,
)
from models.records import (
    ActivityRecord,
    DateRange,
    Notification,
    SchoolAttendance,
    TraineeProfile,
    Trainer,
    TrainerCertification,
    WeeklyReport,
    WorkingTimeRecord,
)

__all__ = [
    "TrainingPlanError",
    "NotFoundError",
    "ValidationError",
    "InvalidTransitionError",
    "PersistenceError",
    "CompetencyArea",
    "CurriculumCatalog",
    "CurriculumUnit",
    "ExamModality",
    "ExamSection",
    "ExamType",
    "ExaminationTemplate",
    "Occupation",
    "ExamResult",
    "ExamState",
    "Examination",
    "ScheduledUnit",
    "TrainingPlan",
    "UnitStatus",
    "ActivityRecord",
    "DateRange",
    "Notification",
    "SchoolAttendance",
    "TraineeProfile",
    "Trainer",
    "TrainerCertification",
    "WeeklyReport",
    "WorkingTimeRecord",
]
