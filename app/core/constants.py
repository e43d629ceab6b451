from enum import Enum


class RoleEnum(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

class QuestionTypeEnum(str, Enum):
    SINGLE_MCQ = "SINGLE_MCQ"
    MULTI_MCQ = "MULTI_MCQ"
    NUMERICAL = "NUMERICAL"
    DESCRIPTIVE = "DESCRIPTIVE"

MCQ_QUESTION_TYPES = {QuestionTypeEnum.SINGLE_MCQ, QuestionTypeEnum.MULTI_MCQ}

class QuizAttemptStatusEnum(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"

class EnrollmentStatusEnum(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

class COEnum(str, Enum):
    CO1 = "CO1"
    CO2 = "CO2"
    CO3 = "CO3"
    CO4 = "CO4"
    CO5 = "CO5"

class AssessmentComponentEnum(str, Enum):
    MST1 = "MST1"
    MST2 = "MST2"
    QUIZ = "QUIZ"
    END_SEM = "END_SEM"
    CIE = "CIE"

class AttendanceMarkEnum(str, Enum):
    PRESENT = "P"
    ABSENT = "A"

CO_BUCKETS = [co.value for co in COEnum]

MST1_SLOTS = ("mst1_q1", "mst1_q2", "mst1_q3")
MST2_SLOTS = ("mst2_q1", "mst2_q2", "mst2_q3")
# End-semester question i always measures CO i.
END_SEM_SLOTS = ("end_sem_q1", "end_sem_q2", "end_sem_q3", "end_sem_q4", "end_sem_q5")

# Direct CO attainment blend: continuous internal evaluation vs semester end exam.
CIE_WEIGHT = 0.30
SEE_WEIGHT = 0.70

# (minimum percentage of students at or above target, attainment level), checked high to low.
ATTAINMENT_THRESHOLDS = ((70, 3), (60, 2), (50, 1))

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
