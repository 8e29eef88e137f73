from enum import Enum, IntEnum

class FormStep(IntEnum):
    INSTRUCTIONS = 0
    PERSONAL = 1
    ACADEMIC = 2
    EXPERIENCE = 3
    RESPONSIBILITIES = 4
    RESEARCH = 5
    DECLARATION = 6

FINAL_STEP = FormStep.DECLARATION

class SubmissionStage(str, Enum):
    Idle = "idle"
    Generating = "generating"
    Merging = "merging"
    Sending = "sending"
    Success = "success"
    Error = "error"

class EmailStatus(str, Enum):
    Idle = "idle"
    Sending = "sending"
    Sent = "sent"
    Failed = "failed"

class AttachmentStatus(str, Enum):
    Merged = "merged"
    Skipped = "skipped"
    Failed = "failed"
