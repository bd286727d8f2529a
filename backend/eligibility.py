# Business logic - eligibility classification over billing rows
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple, Union

from cooldowns import DEFAULT_POLICY, CooldownPolicy
from models import (
    BillingRecord,
    EligibilityRecord,
    EligibilityStatus,
    ServiceType,
    derive_payor_category,
    derive_service_type,
    normalize_billing_record,
)

logger = logging.getLogger(__name__)

Timestamp = Union[date, datetime]


def _materialize(records: Any) -> List[Any]:
    """Turn the input into a list up front so bad input fails before any work."""
    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise TypeError(f"records must be a collection of billing rows, got {type(records).__name__}")
    if not isinstance(records, Iterable):
        raise TypeError(f"records must be iterable, got {type(records).__name__}")
    return list(records)


def days_between(last_service_date: date, now: Timestamp) -> int:
    """Whole days from the service date to now, clamped at zero."""
    if isinstance(now, datetime):
        start = datetime.combine(last_service_date, time.min, tzinfo=now.tzinfo)
        days = (now - start) // timedelta(days=1)
    else:
        days = (now - last_service_date).days
    return max(0, days)


def latest_by_patient_and_service(
    records: List[Any],
) -> Dict[Tuple[str, ServiceType], BillingRecord]:
    """Keep the most recent qualifying row per (patient, service type)."""
    latest: Dict[Tuple[str, ServiceType], BillingRecord] = {}
    for raw in records:
        record = normalize_billing_record(raw)
        if record is None or record.serviceDate is None:
            continue
        service_type = derive_service_type(record.serviceTag)
        if service_type is None:
            continue

        key = (record.patientIdentifier, service_type)
        existing = latest.get(key)
        if existing is None or record.serviceDate > existing.serviceDate:
            latest[key] = record
    return latest


def _sort_key(row: EligibilityRecord):
    return (
        0 if row.status == EligibilityStatus.OVERDUE else 1,
        -row.daysSinceService,
        row.patientIdentifier,
        row.serviceType.value,
    )


def classify(
    records: Iterable[Any],
    now: Timestamp,
    policy: CooldownPolicy = DEFAULT_POLICY,
) -> List[EligibilityRecord]:
    """
    Classify billing rows into per-patient, per-service eligibility.

    Rows without a parseable date, a patient identity, or a known service
    tag are skipped. Patients not yet within the due-soon window are left
    out. Result order: overdue first, then longest since last service.
    """
    if not isinstance(now, date):
        raise TypeError(f"now must be a date or datetime, got {type(now).__name__}")
    rows = _materialize(records)

    results: List[EligibilityRecord] = []
    for (patient_key, service_type), record in latest_by_patient_and_service(rows).items():
        days_since = days_between(record.serviceDate, now)
        payor = derive_payor_category(record.payorHint)
        cooldown = policy.cooldown_for(payor)
        status = policy.status_for(days_since, cooldown)
        if status is None:
            continue

        results.append(EligibilityRecord(
            patientIdentifier=patient_key,
            patientName=record.patientName,
            serviceType=service_type,
            lastServiceDate=record.serviceDate,
            daysSinceService=days_since,
            payorCategory=payor,
            cooldownDays=cooldown,
            nextEligibleDate=record.serviceDate + timedelta(days=cooldown),
            status=status,
        ))

    results.sort(key=_sort_key)
    logger.debug("Classified %d eligibility rows from %d billing rows", len(results), len(rows))
    return results


def _coerce_filter(value: Any, enum_cls):
    """Accept an enum member or its value (case-insensitive); None/""/"all" mean no filter."""
    if value is None or isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    if not text or text.lower() == "all":
        return None
    for member in enum_cls:
        if member.value.lower() == text.lower():
            return member
    raise ValueError(f"Unknown {enum_cls.__name__} filter: {value!r}")


def filter_eligibility(
    rows: Iterable[EligibilityRecord],
    text_query: Optional[str] = None,
    service_type: Optional[Union[ServiceType, str]] = None,
    status: Optional[Union[EligibilityStatus, str]] = None,
) -> List[EligibilityRecord]:
    """AND of: name contains text_query (case-insensitive), exact service type, exact status."""
    wanted_service = _coerce_filter(service_type, ServiceType)
    wanted_status = _coerce_filter(status, EligibilityStatus)
    query = (text_query or "").strip().lower()

    return [
        row for row in rows
        if (not query or query in row.patientName.lower())
        and (wanted_service is None or row.serviceType == wanted_service)
        and (wanted_status is None or row.status == wanted_status)
    ]


def summarize(rows: Iterable[EligibilityRecord]) -> Dict[str, int]:
    """Dashboard counters: per status, per service line, and total."""
    rows = list(rows)
    return {
        "overdue": sum(1 for r in rows if r.status == EligibilityStatus.OVERDUE),
        "dueSoon": sum(1 for r in rows if r.status == EligibilityStatus.DUE_SOON),
        "eligible": sum(1 for r in rows if r.status == EligibilityStatus.ELIGIBLE),
        "brainwave": sum(1 for r in rows if r.serviceType == ServiceType.BRAINWAVE),
        "ultrasound": sum(1 for r in rows if r.serviceType == ServiceType.ULTRASOUND),
        "vitalwave": sum(1 for r in rows if r.serviceType == ServiceType.VITALWAVE),
        "total": len(rows),
    }
