import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone

from psychometric.config import (
    FAILURE_POLICY_FAIL_SESSION,
    FAILURE_POLICY_KEEP_PARTIAL,
    generation_workers,
    section_failure_policy,
)
from psychometric.generation.categories import (
    SECTION_APTITUDE,
    SECTION_NAMES,
    SectionGenerationSpec,
    build_section_plan,
)
from psychometric.generation.engine import QuestionGenerationEngine
from psychometric.generation.provider import ContentProvider
from psychometric.models.session import SubmitAnswersRequest, UserProfile
from psychometric.scoring.score_calculator import (
    calculate_aggregate,
    determine_performance_bucket,
    score_session,
)
from psychometric.services.session_store import (
    STATUS_COMPLETED,
    STATUS_CREATED,
    STATUS_FAILED,
    STATUS_GENERATING,
    STATUS_PARTIAL_READY,
    STATUS_READY,
    SessionStore,
    session_store,
)

LOGGER = logging.getLogger(__name__)

SUBMITTABLE_STATUSES = {STATUS_PARTIAL_READY, STATUS_READY}


class SubmissionError(ValueError):
    """Raised when a submission is malformed; nothing has been stored."""


class SubmissionConflictError(SubmissionError):
    """Raised when the session cannot take answers: already submitted or not ready."""


def resolve_status(
    section_ready: dict[str, bool],
    current: str,
    failed_sections: list[int],
    policy: str = FAILURE_POLICY_FAIL_SESSION,
) -> str:
    """Merge section readiness into a session status.

    COMPLETED never moves. Under ``fail_session`` a recorded failure (or an
    existing FAILED) wins over everything else. Under ``keep_partial`` the
    session stays usable while aptitude is ready and only fails once
    aptitude is unavailable and nothing is still pending.
    """
    if current == STATUS_COMPLETED:
        return STATUS_COMPLETED

    names = list(SECTION_NAMES.values())
    ready_count = sum(1 for name in names if section_ready.get(name))
    aptitude_ready = bool(section_ready.get(SECTION_NAMES[SECTION_APTITUDE]))

    if failed_sections or current == STATUS_FAILED:
        if policy != FAILURE_POLICY_KEEP_PARTIAL:
            return STATUS_FAILED
        if aptitude_ready:
            return STATUS_PARTIAL_READY
        failed_names = {SECTION_NAMES.get(number) for number in failed_sections}
        pending = [name for name in names if not section_ready.get(name) and name not in failed_names]
        return STATUS_GENERATING if pending else STATUS_FAILED

    if ready_count == len(names):
        return STATUS_READY
    if aptitude_ready:
        return STATUS_PARTIAL_READY
    if current in {STATUS_READY, STATUS_PARTIAL_READY}:
        return current
    return STATUS_GENERATING


class SessionOrchestrator:
    def __init__(
        self,
        store: SessionStore | None = None,
        provider=None,
        *,
        engine: QuestionGenerationEngine | None = None,
        max_workers: int | None = None,
        failure_policy: str | None = None,
    ) -> None:
        self.store = store or session_store
        self.engine = engine or QuestionGenerationEngine(provider or ContentProvider())
        self.failure_policy = failure_policy or section_failure_policy()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or generation_workers(),
            thread_name_prefix="section-generation",
        )
        self._futures: dict[str, list[Future]] = {}
        self._futures_lock = threading.Lock()

    def create_session(self, profile: UserProfile) -> dict:
        session = self.store.create_session(profile)
        session_id = session["sessionId"]
        LOGGER.info("Created psychometric session %s for %s", session_id, profile.careerInterest)

        futures = [
            self._executor.submit(self._run_section, session_id, spec, profile)
            for spec in build_section_plan(profile)
        ]
        with self._futures_lock:
            self._futures[session_id] = futures
        for future in futures:
            future.add_done_callback(lambda _, sid=session_id: self._release_futures(sid))

        def _start(data: dict) -> None:
            # A fast section task may already have moved the status on.
            if data.get("status") == STATUS_CREATED:
                data["status"] = STATUS_GENERATING

        updated = self.store.update_session(session_id, _start)
        return updated or session

    def _run_section(self, session_id: str, spec: SectionGenerationSpec, profile: UserProfile) -> None:
        LOGGER.info("Generating section %s (%s) for session %s", spec.section_number, spec.name, session_id)
        try:
            result = self.engine.generate_section(
                spec.section_number,
                list(spec.categories),
                spec.item_type,
                profile,
            )
        except Exception as exc:
            LOGGER.exception("Section %s generation failed for session %s", spec.section_number, session_id)
            self.mark_section_failed(session_id, spec.section_number, str(exc) or exc.__class__.__name__)
            return
        self.apply_section_result(session_id, spec.section_number, result.questions, result.summary())

    def apply_section_result(
        self,
        session_id: str,
        section_number: int,
        questions: list[dict],
        summary: dict | None = None,
    ) -> dict | None:
        if len(questions) != self.engine.target:
            LOGGER.error(
                "Section %s for session %s produced %d questions, expected %d",
                section_number,
                session_id,
                len(questions),
                self.engine.target,
            )
            return self.mark_section_failed(session_id, section_number, "incomplete section")

        section_name = SECTION_NAMES[section_number]
        key = str(section_number)

        def _apply(data: dict) -> None:
            slots = data.setdefault("sectionQuestions", {})
            if slots.get(key):
                LOGGER.info("Section %s already stored for session %s; ignoring redelivery", key, session_id)
                return
            slots[key] = list(questions)
            data.setdefault("sectionReady", {})[section_name] = True
            if summary is not None:
                data.setdefault("generation", {})[key] = summary
            data["status"] = resolve_status(
                data["sectionReady"],
                data.get("status", STATUS_GENERATING),
                data.get("failedSections") or [],
                self.failure_policy,
            )

        updated = self.store.update_session(session_id, _apply)
        if updated is not None:
            LOGGER.info("Section %s ready for session %s; status=%s", section_name, session_id, updated["status"])
        return updated

    def mark_section_failed(self, session_id: str, section_number: int, error: str | None = None) -> dict | None:
        key = str(section_number)

        def _fail(data: dict) -> None:
            failed = list(data.get("failedSections") or [])
            if section_number not in failed:
                failed.append(section_number)
            data["failedSections"] = sorted(failed)
            if error:
                data.setdefault("generation", {}).setdefault(key, {})["error"] = error
            data["status"] = resolve_status(
                data.get("sectionReady") or {},
                data.get("status", STATUS_GENERATING),
                data["failedSections"],
                self.failure_policy,
            )

        updated = self.store.update_session(session_id, _fail)
        if updated is not None:
            LOGGER.warning(
                "Section %s failed for session %s (policy=%s); status=%s",
                section_number,
                session_id,
                self.failure_policy,
                updated["status"],
            )
        return updated

    def get_session(self, session_id: str) -> dict | None:
        return self.store.get_session(session_id)

    def get_status(self, session_id: str) -> dict | None:
        session = self.store.get_session(session_id)
        if session is None:
            return None
        slots = session.get("sectionQuestions") or {}
        return {
            "sessionId": session["sessionId"],
            "status": session["status"],
            "progress": dict(session.get("sectionReady") or {}),
            "questionCounts": {
                name: len(slots.get(str(number)) or []) for number, name in SECTION_NAMES.items()
            },
            "failedSections": list(session.get("failedSections") or []),
        }

    def get_questions(self, session_id: str, section_number: int | None = None) -> list[dict] | None:
        return self.store.get_questions(session_id, section_number)

    def submit_answers(self, session_id: str, request: SubmitAnswersRequest) -> dict | None:
        answers = [answer.model_dump() for answer in request.answers]
        results = request.results.model_dump(mode="json")

        def _submit(data: dict) -> None:
            current = data.get("status")
            if current == STATUS_COMPLETED or data.get("answers") is not None:
                raise SubmissionConflictError("answers were already submitted for this session")
            if current not in SUBMITTABLE_STATUSES:
                raise SubmissionConflictError(f"session is {current}; answers can only be submitted once it is ready")
            questions = [
                question
                for slot in (data.get("sectionQuestions") or {}).values()
                for question in slot or []
            ]
            _validate_answers(answers, questions)
            data["answers"] = answers
            data["testResults"] = results
            data["submission"] = {
                "userId": request.userId,
                "testId": request.testId,
                "warnings": request.warnings,
                "submittedBy": request.submittedBy,
            }
            data["status"] = STATUS_COMPLETED
            data["completedAt"] = datetime.now(timezone.utc)

        updated = self.store.update_session(session_id, _submit)
        if updated is None:
            return None

        aggregate = calculate_aggregate(updated["questions"], answers, results)
        LOGGER.info(
            "Session %s submitted by %s (%d answers, overall=%.2f)",
            session_id,
            request.submittedBy,
            len(answers),
            aggregate["overallScore"],
        )
        return {
            "sessionId": session_id,
            "userId": request.userId,
            "testId": request.testId,
            "status": updated["status"],
            **request.results.model_dump(exclude={"submittedAt"}),
            "warnings": request.warnings,
            "submittedBy": request.submittedBy,
            "submittedAt": request.results.submittedAt,
            "overallScore": aggregate["overallScore"],
            "performanceBucket": determine_performance_bucket(aggregate["overallScore"]),
        }

    def get_report(self, session_id: str) -> dict | None:
        session = self.store.get_session(session_id)
        if session is None:
            return None
        report = score_session(session.get("questions"), session.get("answers"), session.get("testResults"))
        return {
            "sessionId": session_id,
            "status": session["status"],
            **report,
            "generatedAt": datetime.now(timezone.utc),
        }

    def _release_futures(self, session_id: str) -> None:
        with self._futures_lock:
            futures = self._futures.get(session_id)
            if futures and all(future.done() for future in futures):
                del self._futures[session_id]

    def wait_for_generation(self, session_id: str, timeout: float | None = None) -> bool:
        with self._futures_lock:
            futures = list(self._futures.get(session_id) or [])
        if not futures:
            return True
        _, not_done = wait(futures, timeout=timeout)
        if not not_done:
            with self._futures_lock:
                self._futures.pop(session_id, None)
        return not not_done

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_tasks)


def _validate_answers(answers: list[dict], questions: list[dict]) -> None:
    by_id = {str(question.get("id")): question for question in questions}
    seen: set[str] = set()
    for answer in answers:
        question_id = str(answer.get("questionId"))
        if question_id in seen:
            raise SubmissionError(f"duplicate answer for question {question_id}")
        seen.add(question_id)
        question = by_id.get(question_id)
        if question is None:
            raise SubmissionError(f"unknown question {question_id}")
        selected = answer.get("selectedOptionIndex")
        if selected is None:
            continue
        option_count = len(question.get("options") or [])
        if selected < 0 or selected >= option_count:
            raise SubmissionError(
                f"selectedOptionIndex {selected} out of range for question {question_id} ({option_count} options)"
            )


session_orchestrator = SessionOrchestrator()
