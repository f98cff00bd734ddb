"""Pre-send completeness checks for a quotation."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from quotedesk.services.perf_monitor import timed

logger = logging.getLogger("quotedesk-validation")


@dataclass
class ValidationIssue:
    type: str  # room_zero_value | missing_product | missing_accessory | missing_installation | missing_handling_charge
    message: str
    room_id: Optional[int] = None
    room_name: Optional[str] = None


@dataclass
class ValidationWarning:
    type: str  # check_accessories
    message: str
    accessories: List[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)


def _room_issue(kind: str, template: str, room: Dict[str, Any]) -> ValidationIssue:
    name = room.get("name") or "Untitled"
    return ValidationIssue(
        type=kind,
        message=template.format(name=name),
        room_id=room.get("id"),
        room_name=name,
    )


@timed
def validate_quotation(
    details: Dict[str, Any], required_accessories: List[str]
) -> ValidationResult:
    """
    Check a quotation read model (see QuotationService.get_quotation_details)
    before it is sent to the customer.

    Errors block sending; warnings only ask the designer to double-check.
    A quotation without rooms fails immediately with a single error.
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationWarning] = []

    rooms = details.get("rooms") or []
    if not rooms:
        errors.append(ValidationIssue(
            type="room_zero_value",
            message="Quotation must have at least one room.",
        ))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    for room in rooms:
        if room.get("selling_price", 0) == 0:
            errors.append(_room_issue("room_zero_value", 'Room "{name}" has a zero value.', room))
        if not room.get("products"):
            errors.append(_room_issue(
                "missing_product", 'Room "{name}" does not have any products.', room,
            ))
        if not room.get("accessories"):
            errors.append(_room_issue(
                "missing_accessory", 'Room "{name}" does not have any accessories.', room,
            ))
        if not room.get("installation_charges"):
            errors.append(_room_issue(
                "missing_installation", 'Room "{name}" does not have installation charges.', room,
            ))

    if not details.get("installation_handling"):
        errors.append(ValidationIssue(
            type="missing_handling_charge",
            message="Handling charge must be entered.",
        ))

    accessory_names = [
        (acc.get("name") or "").lower()
        for room in rooms
        for acc in room.get("accessories") or []
    ]
    missing = [
        required for required in required_accessories
        if not any(required in name for name in accessory_names)
    ]
    if missing:
        warnings.append(ValidationWarning(
            type="check_accessories",
            message="Please check that the following required accessories are added:",
            accessories=missing,
        ))

    logger.debug(
        "quotation validated: %d errors, %d warnings", len(errors), len(warnings),
        extra={"quotation_id": details.get("id")},
    )
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
