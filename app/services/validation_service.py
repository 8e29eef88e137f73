from typing import Any, Optional

from pydantic import BaseModel, Field

from app.core.form_rules import DEFAULT_REQUIRED_MESSAGE, FormRules, RequiredField, active_rules
from app.models.application import ApplicationRecord, EmbeddedContent
from app.models.session import Acknowledgements


class StepValidation(BaseModel):
    ok: bool
    errors: dict[str, str] = Field(default_factory=dict)
    # Gate-level messages: shown as a blocking notice, never inline.
    alerts: list[str] = Field(default_factory=list)

    @property
    def alert(self) -> Optional[str]:
        return "\n".join(self.alerts) if self.alerts else None


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, EmbeddedContent):
        return not value.data
    if isinstance(value, str):
        return not value.strip()
    return False


def _as_number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _check_required(record: ApplicationRecord, required: list[RequiredField], errors: dict[str, str]) -> None:
    for item in required:
        if is_missing(getattr(record, item.field, None)):
            errors[item.field] = item.message


# ------------------------------------------------------------
# STEP VALIDATOR
# ------------------------------------------------------------
def validate_step(
    step: int,
    record: ApplicationRecord,
    acknowledgements: Optional[Acknowledgements] = None,
    rules: Optional[FormRules] = None,
) -> StepValidation:
    """
    Pure check of one step against the rule table.
    1. Acknowledgement gate (short-circuits, error map stays empty)
    2. Required fields
    3. Field matches (reported on the confirmation field unless it is already missing)
    4. Sum ceilings (gate-level)
    5. Complete nested groups (per entry + gate-level summary)
    6. Conditional requirement sets
    """
    rule = (rules or active_rules).for_step(step)
    acknowledgements = acknowledgements or Acknowledgements()

    if rule.acknowledgement and not getattr(acknowledgements, rule.acknowledgement.flag, False):
        return StepValidation(ok=False, alerts=[rule.acknowledgement.message])

    errors: dict[str, str] = {}
    alerts: list[str] = []

    _check_required(record, rule.required, errors)

    for match in rule.matches:
        first = getattr(record, match.field, "") or ""
        second = getattr(record, match.confirm_field, "") or ""
        if first != second and match.confirm_field not in errors:
            errors[match.confirm_field] = match.message

    for cap in rule.sum_caps:
        total = sum(_as_number(getattr(record, f, 0)) for f in cap.fields)
        if total > cap.limit:
            alerts.append(cap.message)

    for group in rule.complete_groups:
        nested = getattr(record, group.group, None)
        if nested is None:
            continue
        missing = [key for key in type(nested).model_fields if is_missing(getattr(nested, key))]
        for key in missing:
            errors[f"{group.group}.{key}"] = DEFAULT_REQUIRED_MESSAGE
        if missing:
            alerts.append(group.message)

    for conditional in rule.conditional:
        if getattr(record, conditional.when_field, None) == conditional.equals:
            _check_required(record, conditional.required, errors)

    return StepValidation(ok=not errors and not alerts, errors=errors, alerts=alerts)
