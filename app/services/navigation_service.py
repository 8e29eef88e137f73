from loguru import logger

from app.models.enums import FINAL_STEP, FormStep
from app.models.session import ApplicationSession
from app.services.validation_service import StepValidation, validate_step


def next_step(session: ApplicationSession) -> StepValidation:
    """
    Validates the current step; advances by exactly one on success.
    On failure the cursor stays put and the error map is replaced.
    """
    result = validate_step(session.step, session.record, session.acknowledgements)

    session.errors = dict(result.errors)
    if result.ok:
        session.step = FormStep(min(session.step + 1, FINAL_STEP))
        logger.info(f"Session {session.id} advanced to step {int(session.step)}")
    else:
        logger.info(
            f"Session {session.id} blocked at step {int(session.step)}: "
            f"{len(result.errors)} field error(s), {len(result.alerts)} alert(s)"
        )

    session.touch()
    return result


def previous_step(session: ApplicationSession) -> FormStep:
    session.step = FormStep(max(session.step - 1, FormStep.INSTRUCTIONS))
    session.touch()
    return session.step
