from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy import select

from psychometric.db import SessionLocal
from psychometric.db_models import PsychometricSessionDB
from psychometric.generation.categories import SECTION_NAMES
from psychometric.models.session import UserProfile

STATUS_CREATED = "CREATED"
STATUS_GENERATING = "GENERATING"
STATUS_PARTIAL_READY = "PARTIAL_READY"
STATUS_READY = "READY"
STATUS_COMPLETED = "COMPLETED"
STATUS_FAILED = "FAILED"


class SessionStore:
    """Document-per-row repository for assessment sessions.

    Every write after creation goes through ``update_session`` so concurrent
    section tasks never lose each other's changes.
    """

    def __init__(self) -> None:
        self._write_lock = threading.Lock()

    def create_session(self, profile: UserProfile) -> dict:
        session_id = str(uuid4())
        now_dt = datetime.now(timezone.utc)
        session_data = {
            "sessionId": session_id,
            "userProfile": profile.model_dump(),
            "status": STATUS_CREATED,
            "sectionReady": {name: False for name in SECTION_NAMES.values()},
            "sectionQuestions": {},
            "failedSections": [],
            "generation": {},
            "answers": None,
            "testResults": None,
            "submission": None,
            "startedAt": now_dt,
            "updatedAt": now_dt,
            "completedAt": None,
        }
        with SessionLocal() as db:
            row = PsychometricSessionDB(
                session_id=session_id,
                candidate_name=profile.name,
                career_interest=profile.careerInterest,
                status=STATUS_CREATED,
                started_at=now_dt,
                data_json=_jsonify(session_data),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return self._row_to_session_dict(row)

    def get_session(self, session_id: str) -> dict | None:
        with SessionLocal() as db:
            row = self._get_session_row(db, session_id)
            if row is None:
                return None
            return self._row_to_session_dict(row)

    def get_questions(self, session_id: str, section_number: int | None = None) -> list[dict] | None:
        session = self.get_session(session_id)
        if not session:
            return None
        questions = list(session.get("questions") or [])
        if section_number is None:
            return questions
        return [question for question in questions if question.get("sectionNumber") == section_number]

    def update_session(self, session_id: str, mutator: Callable[[dict], Any]) -> dict | None:
        """Apply ``mutator`` to the stored document in one transaction.

        The mutator receives a private copy of the document and edits it in
        place. If it raises, nothing is written and the exception propagates.
        """
        with self._write_lock, SessionLocal() as db:
            stmt = (
                select(PsychometricSessionDB)
                .where(PsychometricSessionDB.session_id == str(session_id))
                .with_for_update()
            )
            row = db.execute(stmt).scalars().first()
            if row is None:
                return None
            data = copy.deepcopy(self._read_data(row))
            mutator(data)
            self._write_data(row, data)
            db.add(row)
            db.commit()
            db.refresh(row)
            return self._row_to_session_dict(row)

    def save_session(self, session: dict) -> dict | None:
        session_id = session.get("sessionId")
        if not session_id:
            return None

        def _replace(data: dict) -> None:
            data.clear()
            data.update(copy.deepcopy(session))
            data.pop("questions", None)
            data["sessionId"] = session_id

        return self.update_session(session_id, _replace)

    def _get_session_row(self, db, session_id: str) -> PsychometricSessionDB | None:
        return db.get(PsychometricSessionDB, str(session_id))

    def _write_data(self, row: PsychometricSessionDB, data: dict) -> None:
        data.pop("questions", None)
        data["updatedAt"] = datetime.now(timezone.utc)
        row.status = str(data.get("status") or row.status)
        row.data_json = _jsonify(data)

    def _read_data(self, row: PsychometricSessionDB) -> dict:
        data = dict(row.data_json or {})
        data.setdefault("sessionId", row.session_id)
        data.setdefault("status", row.status)
        data.setdefault("startedAt", row.started_at)
        data.setdefault("sectionReady", {name: False for name in SECTION_NAMES.values()})
        data.setdefault("sectionQuestions", {})
        data.setdefault("failedSections", [])
        data.setdefault("generation", {})
        return data

    def _row_to_session_dict(self, row: PsychometricSessionDB) -> dict:
        data = self._read_data(row)
        data["sessionId"] = row.session_id
        data["status"] = row.status
        data["startedAt"] = row.started_at
        slots = data.get("sectionQuestions") or {}
        data["questions"] = [
            question
            for section_number in sorted(SECTION_NAMES)
            for question in slots.get(str(section_number)) or []
        ]
        return _jsonify(data)


session_store = SessionStore()


def _jsonify(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): _jsonify(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_jsonify(item) for item in value]
    return value
