"""Jobs, candidates and interview appointments for the recruiter dashboard.

Records live in memory and are optionally mirrored to a JSON file after every
change. The dialogue core does not depend on this module.
"""

from __future__ import annotations

import json
import secrets
import string
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel

from .config import ScreeningConfig
from .logs import log_event

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 7

AppointmentStatus = Literal["scheduled", "completed", "cancelled"]


class Job(BaseModel):
    id: str
    title: str
    description: str = ""
    requirements: str = ""
    created_at: str


class Candidate(BaseModel):
    id: str
    name: str
    phone: str = ""
    current_ctc: Optional[str] = None
    expected_ctc: Optional[str] = None
    notice_period: Optional[str] = None
    experience: Optional[str] = None


class Appointment(BaseModel):
    id: str
    job_id: str
    candidate_id: str
    date_time: str
    status: AppointmentStatus = "scheduled"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


class ScreeningStore:
    def __init__(self, data_file: str = "", seed_sample_data: bool = True):
        self.path = Path(data_file) if data_file else None
        self.jobs: dict[str, Job] = {}
        self.candidates: dict[str, Candidate] = {}
        self.appointments: dict[str, Appointment] = {}
        self._load()
        if seed_sample_data and not self.jobs:
            self.add_sample_data()

    @classmethod
    def from_config(cls, config: Optional[ScreeningConfig] = None) -> "ScreeningStore":
        cfg = config or ScreeningConfig.from_env()
        return cls(data_file=cfg.data_file, seed_sample_data=cfg.seed_sample_data)

    # ----------------- persistence -----------------
    def _load(self) -> None:
        if not self.path or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            jobs = {j["id"]: Job(**j) for j in data.get("jobs", [])}
            candidates = {c["id"]: Candidate(**c) for c in data.get("candidates", [])}
            appointments = {a["id"]: Appointment(**a) for a in data.get("appointments", [])}
        except Exception as e:
            log_event(f"DATA_LOAD_FAIL | path={self.path} error={e}")
            return
        self.jobs, self.candidates, self.appointments = jobs, candidates, appointments
        log_event(
            f"DATA_LOAD | jobs={len(jobs)} candidates={len(candidates)} appointments={len(appointments)}"
        )

    def _save(self) -> None:
        if not self.path:
            return
        data = {
            "jobs": [j.model_dump() for j in self.jobs.values()],
            "candidates": [c.model_dump() for c in self.candidates.values()],
            "appointments": [a.model_dump() for a in self.appointments.values()],
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            log_event(f"DATA_SAVE_FAIL | path={self.path} error={e}")

    def _unique_id(self, existing: dict) -> str:
        while True:
            rid = _new_id()
            if rid not in existing:
                return rid

    def add_sample_data(self) -> None:
        job_id = self.create_job(
            title="Frontend Developer",
            description="We are looking for a skilled frontend developer to join our team.",
            requirements="3+ years of experience with React, TypeScript knowledge, and good communication skills.",
        )
        candidate_id = self.create_candidate(name="John Doe", phone="+1234567890")
        tomorrow = datetime.now(timezone.utc) + timedelta(days=1)
        self.create_appointment(
            job_id=job_id,
            candidate_id=candidate_id,
            date_time=tomorrow.isoformat(),
            status="scheduled",
        )

    # ----------------- jobs -----------------
    def list_jobs(self) -> list[Job]:
        return list(self.jobs.values())

    def get_job(self, job_id: str) -> Optional[Job]:
        return self.jobs.get(job_id)

    def create_job(self, title: str, description: str = "", requirements: str = "") -> str:
        jid = self._unique_id(self.jobs)
        self.jobs[jid] = Job(
            id=jid,
            title=(title or "Untitled Role").strip(),
            description=description,
            requirements=requirements,
            created_at=_now(),
        )
        self._save()
        return jid

    def update_job(self, job_id: str, **changes) -> bool:
        return self._update(self.jobs, job_id, Job, changes, frozen=("id", "created_at"))

    def delete_job(self, job_id: str) -> bool:
        return self._delete(self.jobs, job_id)

    # ----------------- candidates -----------------
    def list_candidates(self) -> list[Candidate]:
        return list(self.candidates.values())

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        return self.candidates.get(candidate_id)

    def create_candidate(self, name: str, phone: str = "", **details) -> str:
        cid = self._unique_id(self.candidates)
        self.candidates[cid] = Candidate(id=cid, name=name, phone=phone, **details)
        self._save()
        return cid

    def update_candidate(self, candidate_id: str, **changes) -> bool:
        return self._update(self.candidates, candidate_id, Candidate, changes, frozen=("id",))

    def delete_candidate(self, candidate_id: str) -> bool:
        return self._delete(self.candidates, candidate_id)

    # ----------------- appointments -----------------
    def list_appointments(self) -> list[Appointment]:
        return list(self.appointments.values())

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.appointments.get(appointment_id)

    def appointments_for_job(self, job_id: str) -> list[Appointment]:
        return [a for a in self.appointments.values() if a.job_id == job_id]

    def appointments_for_candidate(self, candidate_id: str) -> list[Appointment]:
        return [a for a in self.appointments.values() if a.candidate_id == candidate_id]

    def create_appointment(
        self,
        job_id: str,
        candidate_id: str,
        date_time: str,
        status: AppointmentStatus = "scheduled",
    ) -> str:
        aid = self._unique_id(self.appointments)
        self.appointments[aid] = Appointment(
            id=aid, job_id=job_id, candidate_id=candidate_id, date_time=date_time, status=status
        )
        self._save()
        return aid

    def update_appointment(self, appointment_id: str, **changes) -> bool:
        return self._update(self.appointments, appointment_id, Appointment, changes, frozen=("id",))

    def delete_appointment(self, appointment_id: str) -> bool:
        return self._delete(self.appointments, appointment_id)

    # ----------------- shared -----------------
    def _update(self, records: dict, rid: str, model: type[BaseModel], changes: dict, frozen: tuple) -> bool:
        current = records.get(rid)
        if current is None:
            return False
        merged = current.model_dump()
        merged.update({k: v for k, v in changes.items() if k not in frozen})
        # Re-validate so a bad status is rejected instead of stored.
        records[rid] = model(**merged)
        self._save()
        return True

    def _delete(self, records: dict, rid: str) -> bool:
        if records.pop(rid, None) is None:
            return False
        self._save()
        return True

    def stats(self) -> dict:
        by_status = {"scheduled": 0, "completed": 0, "cancelled": 0}
        for a in self.appointments.values():
            by_status[a.status] += 1
        return {
            "jobs": len(self.jobs),
            "candidates": len(self.candidates),
            "appointments": len(self.appointments),
            "appointments_by_status": by_status,
        }
