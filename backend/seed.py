# Seed data - demo billing rows, dated relative to "today"
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List

from store import BillingRecordStore


def demo_billing_rows(today: date) -> List[Dict[str, Any]]:
    """
    Demo rows using the raw field names the billing sheet exports.
    With the default policy, as of `today`:
      Jane Doe / Ultrasound     200 days, PPO        -> eligible
      John Smith / BrainWave    400 days, PPO        -> overdue
      Maria Garcia / VitalWave  350 days, Medicare   -> due soon
      Maria Garcia / Ultrasound  20 days, Medicare   -> not yet due
      Robert Lee / BrainWave    500 days, Medicare   -> overdue
      Robert Lee / BrainWave    800 days (older row) -> superseded
    plus rows that are skipped (no date, unknown service, no patient).
    """
    def days_ago(n: int) -> str:
        return (today - timedelta(days=n)).isoformat()

    return [
        {
            "patient_uuid": "pt-0001",
            "patient_name": "Jane Doe",
            "date_of_service": days_ago(200),
            "source_tab": "ULTRASOUND",
            "billing_status": "Paid",
        },
        {
            "patient_uuid": "pt-0002",
            "patient_name": "John Smith",
            "date_of_service": days_ago(400),
            "source_tab": "BRAINWAVE BILLING",
            "payor_type": "Blue Cross PPO",
        },
        {
            "patient_uuid": "pt-0003",
            "patient_name": "Maria Garcia",
            "date_of_service": days_ago(350),
            "source_tab": "VITALWAVE",
            "payor_type": "Medicare",
        },
        {
            "patient_uuid": "pt-0003",
            "patient_name": "Maria Garcia",
            "date_of_service": days_ago(20),
            "source_tab": "ULTRASOUND",
            "payor_type": "Medicare",
        },
        {
            "patient": "Robert Lee",
            "date": days_ago(500),
            "source_tab": "BRAINWAVE",
            "payor_name": "Medicare Advantage",
        },
        {
            "patient": "Robert Lee",
            "date": days_ago(800),
            "source_tab": "BRAINWAVE",
            "payor_name": "Medicare Advantage",
        },
        {
            "patient_name": "Alan Turner",
            "source_tab": "ULTRASOUND",
            "billing_status": "Pending",
        },
        {
            "patient_name": "Alan Turner",
            "date_of_service": days_ago(300),
            "source_tab": "PGX",
        },
        {
            "date_of_service": days_ago(300),
            "source_tab": "VITALWAVE",
        },
    ]


def seed_store(store: BillingRecordStore, today: date) -> None:
    """Reset the store to the demo rows"""
    store.clear()
    store.add_many(demo_billing_rows(today))
