# Record models and the ingestion-boundary normalization step
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
import re

# Reasonable date bounds for billing rows
MIN_VALID_YEAR = 1900
MAX_VALID_YEAR = 2100

# Placeholder names the billing sheet uses when the patient is not known
PLACEHOLDER_NAMES = {"unknown", "n/a", "none"}

DATE_FORMATS = [
    "%Y-%m-%d",  # ISO 8601
    "%m/%d/%Y",  # US format
    "%Y%m%d",  # Compact
]

# Known aliases per canonical field, first non-blank value wins
PATIENT_UUID_ALIASES = ("patientIdentifier", "patient_uuid", "patientUuid", "patient_id")
PATIENT_NAME_ALIASES = ("patientName", "patient_name", "patient", "name")
SERVICE_DATE_ALIASES = ("serviceDate", "date_of_service", "service_date", "dos", "date")
SERVICE_TAG_ALIASES = ("serviceTag", "source_tab", "service_tag", "service_type", "ancillary_code")
PAYOR_HINT_ALIASES = ("payorHint", "payor_hint", "payor_type", "payor_name", "payor", "insurance")


class ServiceType(str, Enum):
    BRAINWAVE = "BrainWave"
    ULTRASOUND = "Ultrasound"
    VITALWAVE = "VitalWave"


class PayorCategory(str, Enum):
    PPO = "PPO"
    MEDICARE = "Medicare"


class EligibilityStatus(str, Enum):
    ELIGIBLE = "eligible"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"


# Checked in order; the first substring found in the tag decides
SERVICE_TAG_RULES: Tuple[Tuple[str, ServiceType], ...] = (
    ("BRAINWAVE", ServiceType.BRAINWAVE),
    ("ULTRASOUND", ServiceType.ULTRASOUND),
    ("VITALWAVE", ServiceType.VITALWAVE),
)


@dataclass(frozen=True)
class BillingRecord:
    """Canonical billing row after alias normalization"""
    patientIdentifier: str
    patientName: str
    serviceDate: Optional[date]
    serviceTag: str
    payorHint: Optional[str] = None


@dataclass(frozen=True)
class EligibilityRecord:
    """One classified (patient, service type) pair"""
    patientIdentifier: str
    patientName: str
    serviceType: ServiceType
    lastServiceDate: date
    daysSinceService: int
    payorCategory: PayorCategory
    cooldownDays: int
    nextEligibleDate: date
    status: EligibilityStatus

    @property
    def key(self) -> Tuple[str, ServiceType]:
        return (self.patientIdentifier, self.serviceType)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and ISO dates"""
        return {
            "patientIdentifier": self.patientIdentifier,
            "patientName": self.patientName,
            "serviceType": self.serviceType.value,
            "lastServiceDate": self.lastServiceDate.isoformat(),
            "daysSinceService": self.daysSinceService,
            "payorCategory": self.payorCategory.value,
            "cooldownDays": self.cooldownDays,
            "nextEligibleDate": self.nextEligibleDate.isoformat(),
            "status": self.status.value,
        }


def normalize_name(name: str) -> str:
    """Normalize name: trim, lowercase, collapse multiple spaces into one"""
    normalized = name.strip().lower()
    normalized = re.sub(r'\s+', ' ', normalized)  # Collapse multiple spaces
    return normalized


def is_placeholder_name(name: str) -> bool:
    return normalize_name(name) in PLACEHOLDER_NAMES


def compute_patient_key(patient_uuid: Optional[str], patient_name: Optional[str]) -> Optional[str]:
    """
    Stable UUID when present, else a name-derived key "temp-<name-with-dashes>".
    Placeholders such as "Unknown" count as missing. Returns None when
    neither identifies the patient.
    """
    if patient_uuid and patient_uuid.strip() and not is_placeholder_name(patient_uuid):
        return patient_uuid.strip()
    if patient_name and patient_name.strip() and not is_placeholder_name(patient_name):
        return "temp-" + normalize_name(patient_name).replace(" ", "-")
    return None


def parse_service_date(value: Any) -> Optional[date]:
    """
    Parse a service date from a date, datetime or string.

    Strings may be YYYY-MM-DD, an ISO-8601 datetime (date part is used),
    MM/DD/YYYY or YYYYMMDD. Anything else, or a year outside 1900-2100,
    yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        parsed = _parse_date_string(value.strip())
    else:
        return None

    if parsed is None or parsed.year < MIN_VALID_YEAR or parsed.year > MAX_VALID_YEAR:
        return None
    return parsed


def _parse_date_string(text: str) -> Optional[date]:
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return parse_timestamp(text).date()
    except ValueError:
        return None


def parse_timestamp(text: str) -> datetime:
    """ISO-8601 date or datetime; a trailing "Z" is read as UTC. Raises ValueError."""
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def derive_service_type(service_tag: Optional[str]) -> Optional[ServiceType]:
    """Match the service tag against the fixed catalog; None when nothing matches."""
    if not service_tag:
        return None
    tag = service_tag.upper()
    for needle, service_type in SERVICE_TAG_RULES:
        if needle in tag:
            return service_type
    return None


def derive_payor_category(payor_hint: Optional[str]) -> PayorCategory:
    """Medicare iff the hint mentions medicare, otherwise PPO (the shorter cooldown)"""
    if payor_hint and "medicare" in payor_hint.lower():
        return PayorCategory.MEDICARE
    return PayorCategory.PPO


def _first_present(raw: Mapping[str, Any], aliases: Tuple[str, ...]) -> Any:
    for alias in aliases:
        value = raw.get(alias)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def _clean_canonical(record: BillingRecord) -> Optional[BillingRecord]:
    patient_key = _as_text(record.patientIdentifier)
    if not patient_key or is_placeholder_name(patient_key):
        return None
    patient_name = _as_text(record.patientName)
    if not patient_name or is_placeholder_name(patient_name):
        patient_name = patient_key
    return replace(
        record,
        patientIdentifier=patient_key,
        patientName=patient_name,
        serviceDate=parse_service_date(record.serviceDate),
        serviceTag=_as_text(record.serviceTag) or "",
        payorHint=_as_text(record.payorHint) or None,
    )


def normalize_billing_record(raw: Any) -> Optional[BillingRecord]:
    """
    Map a raw row (any known field aliases) onto a canonical BillingRecord.

    Already-canonical BillingRecord instances get the same cleanup: text
    fields trimmed, serviceDate re-parsed (bad values become None, datetimes
    become dates). Returns None for rows that cannot identify a patient;
    date and tag checks happen later.
    """
    if isinstance(raw, BillingRecord):
        return _clean_canonical(raw)
    if not isinstance(raw, Mapping):
        return None

    patient_uuid = _as_text(_first_present(raw, PATIENT_UUID_ALIASES))
    patient_name = _as_text(_first_present(raw, PATIENT_NAME_ALIASES))
    patient_key = compute_patient_key(patient_uuid, patient_name)
    if patient_key is None:
        return None
    if not patient_name or is_placeholder_name(patient_name):
        patient_name = patient_key

    return BillingRecord(
        patientIdentifier=patient_key,
        patientName=patient_name,
        serviceDate=parse_service_date(_first_present(raw, SERVICE_DATE_ALIASES)),
        serviceTag=_as_text(_first_present(raw, SERVICE_TAG_ALIASES)) or "",
        payorHint=_as_text(_first_present(raw, PAYOR_HINT_ALIASES)),
    )
