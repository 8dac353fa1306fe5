from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from ..advisories.repository import AdvisoryProvider, NoAdvisories
from ..attendance.evaluator import AttendanceEvaluator
from ..attendance.model import AttendanceDetermination, AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_date_range, require_positive_ids
from ..core.constants import DEFAULT_REPROCESS_DAYS
from ..core.enums import AttendanceStatus, ReprocessTrigger, SaveOutcome
from ..core.exceptions import ProtectedRecordSkipped, UnresolvedEmployee
from ..employees.name_normalizer import EmployeeNameIndex
from ..employees.repository import EmployeeDirectory
from ..grouping.grouper import ShiftGrouper
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator, UtilityPayrollCalculator
from ..scans.repository import ScanRecordStore
from ..schedules.repository import ScheduleProvider
from .model import EmployeeError, EmployeeOutcome, ReconciliationResult, ReconciliationSettings, UnmatchedScan

logger = logging.getLogger(__name__)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min)


def default_range(today: Optional[date] = None, *, days: int = DEFAULT_REPROCESS_DAYS) -> tuple[date, date]:
    """The last `days` days through today."""
    today = today or now_local().date()
    return today - timedelta(days=days), today


def predict_outcome(
    current: Optional[AttendanceRecord],
    determination: AttendanceDetermination,
    *,
    force: bool,
) -> Optional[SaveOutcome]:
    """What save_determination would do; None means the row is protected."""
    if current is None:
        return SaveOutcome.CREATED
    if current.admin_verified and not force:
        return None
    if current.determination == determination and not current.admin_verified:
        return SaveOutcome.UNCHANGED
    return SaveOutcome.UPDATED


class ReconciliationProcessor:
    """Re-derives attendance rows from raw scans over a date range.

    Work is split per employee. Inside an employee everything is sequential and
    dates are evaluated in ascending order. Re-running over the same inputs
    converges to the same rows.
    """

    def __init__(
        self,
        *,
        scans: ScanRecordStore,
        schedules: ScheduleProvider,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        advisories: AdvisoryProvider | None = None,
        settings: ReconciliationSettings | None = None,
        grouper: ShiftGrouper | None = None,
        evaluator: AttendanceEvaluator | None = None,
    ):
        self._scans = scans
        self._schedules = schedules
        self._attendance = attendance
        self._employees = employees
        self._advisories = advisories or NoAdvisories()
        self._settings = settings or ReconciliationSettings()
        self._grouper = grouper or ShiftGrouper(self._settings.grouping_settings())
        self._evaluator = evaluator or AttendanceEvaluator(
            strategy_factory=self._settings.strategy_factory(),
            standard_calculator=StandardPayrollCalculator(
                break_threshold_minutes=self._settings.break_threshold_minutes
            ),
            utility_calculator=UtilityPayrollCalculator(
                break_threshold_minutes=self._settings.break_threshold_minutes
            ),
        )

    def reprocess(
        self,
        start: date,
        end: date,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        dry_run: bool = False,
        force: bool = False,
        trigger: ReprocessTrigger = ReprocessTrigger.MANUAL,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReconciliationResult:
        start, end = require_date_range(start, end, max_days=self._settings.max_range_days)
        requested = sorted(set(require_positive_ids(employee_ids))) if employee_ids is not None else None

        result = ReconciliationResult(start=start, end=end, trigger=trigger, dry_run=bool(dry_run), force=bool(force))
        logger.info(
            "Reconciliation started: %s..%s trigger=%s dry_run=%s force=%s",
            start,
            end,
            trigger.value,
            dry_run,
            force,
        )

        # Scans are read one day either side: a shift started the day before can
        # end inside the range and the last shift can end on the day after.
        load_start = _day_start(start - timedelta(days=1))
        load_end = _day_start(end + timedelta(days=2))
        range_start, range_end = _day_start(start), _day_start(end + timedelta(days=1))

        index = EmployeeNameIndex(self._employees.list_all())
        names_by_employee: dict[int, list[str]] = {}
        for raw_name in self._scans.list_raw_names(start=load_start, end=load_end):
            try:
                employee_id = index.resolve(raw_name)
            except UnresolvedEmployee:
                continue
            names_by_employee.setdefault(employee_id, []).append(raw_name)

        named_in_range: set[int] = set()
        for raw_name in self._scans.list_raw_names(start=range_start, end=range_end):
            try:
                named_in_range.add(index.resolve(raw_name))
            except UnresolvedEmployee as exc:
                logger.info("Unresolved device name: %s", exc)
                result.unresolved_names.append(raw_name)

        if requested is not None:
            targets = requested
        else:
            targets = sorted(
                named_in_range
                | set(self._scans.list_linked_employee_ids(start=range_start, end=range_end))
                | set(self._schedules.list_scheduled_employee_ids(start=start, end=end))
            )

        def work(employee_id: int) -> EmployeeOutcome:
            return self.process_employee(
                employee_id,
                start=start,
                end=end,
                raw_names=names_by_employee.get(employee_id, ()),
                dry_run=dry_run,
                force=force,
            )

        if self._settings.max_workers > 1 and len(targets) > 1:
            self._run_parallel(targets, work, result, cancel_event)
        else:
            self._run_sequential(targets, work, result, cancel_event)

        logger.info(
            "Reconciliation finished: employees=%s processed=%s created=%s updated=%s unchanged=%s "
            "skipped=%s review=%s errors=%s unmatched=%s cancelled=%s",
            result.employees_processed,
            result.processed,
            result.created,
            result.updated,
            result.unchanged,
            result.skipped,
            result.flagged_for_review,
            len(result.errors),
            len(result.unmatched_scans),
            result.cancelled,
        )
        return result

    def run_after_ingestion(
        self,
        start: date,
        end: date,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReconciliationResult:
        """Post-upload hook: same path as a manual run, never forced."""
        return self.reprocess(
            start,
            end,
            employee_ids=employee_ids,
            trigger=ReprocessTrigger.UPLOAD,
            cancel_event=cancel_event,
        )

    def process_employee(
        self,
        employee_id: int,
        *,
        start: date,
        end: date,
        raw_names: Sequence[str] = (),
        dry_run: bool = False,
        force: bool = False,
    ) -> EmployeeOutcome:
        context_start = start - timedelta(days=1)
        scans = self._scans.list_for_employee(
            employee_id=employee_id,
            raw_names=list(raw_names),
            start=_day_start(context_start),
            end=_day_start(end + timedelta(days=2)),
        )
        # The day after the range is resolved too so its window competes for scans;
        # rows are still emitted for start..end only.
        resolutions = self._schedules.resolve_windows(
            employee_id=employee_id, start=context_start, end=end + timedelta(days=1)
        )
        advisories = self._advisories.list_for_employee(employee_id=employee_id, start=start, end=end)
        existing: Mapping[date, AttendanceRecord] = self._attendance.list_for_employee(
            employee_id=employee_id, start=start, end=end
        )

        grouping = self._grouper.group(
            employee_id=employee_id,
            scans=scans,
            resolutions=resolutions,
            emit_start=start,
            emit_end=end,
        )

        counts = {SaveOutcome.CREATED: 0, SaveOutcome.UPDATED: 0, SaveOutcome.UNCHANGED: 0}
        skipped = flagged = 0
        for instance in grouping.instances:
            determination = self._evaluator.evaluate(instance, advisories.get(instance.reference_date))
            if determination.status == AttendanceStatus.NEEDS_MANUAL_REVIEW:
                flagged += 1
                logger.warning(
                    "Employee %s on %s needs manual review: %s",
                    employee_id,
                    determination.shift_date,
                    ", ".join(w.code.value for w in determination.warnings),
                )

            outcome = predict_outcome(existing.get(determination.shift_date), determination, force=force)
            if outcome is not None and not dry_run:
                try:
                    outcome = self._attendance.save_determination(determination, force=force)
                except ProtectedRecordSkipped:
                    outcome = None

            if outcome is None:
                skipped += 1
                logger.debug("Skipped admin-verified attendance %s/%s", employee_id, determination.shift_date)
                continue
            counts[outcome] += 1

        return EmployeeOutcome(
            employee_id=employee_id,
            created=counts[SaveOutcome.CREATED],
            updated=counts[SaveOutcome.UPDATED],
            unchanged=counts[SaveOutcome.UNCHANGED],
            skipped=skipped,
            flagged_for_review=flagged,
            unmatched=tuple(UnmatchedScan.of(employee_id, s) for s in grouping.unmatched),
        )

    def _run_one(self, employee_id: int, work, result: ReconciliationResult) -> None:
        try:
            outcome = work(employee_id)
        except Exception as exc:
            logger.error("Reconciliation failed for employee %s", employee_id, exc_info=True)
            result.errors.append(EmployeeError(employee_id, type(exc).__name__, str(exc)))
            return
        result.add(outcome)

    def _run_sequential(self, targets, work, result: ReconciliationResult, cancel_event) -> None:
        for position, employee_id in enumerate(targets):
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                result.pending_employee_ids = list(targets[position:])
                logger.warning("Reconciliation cancelled, %s employee(s) pending", len(result.pending_employee_ids))
                return
            self._run_one(employee_id, work, result)

    def _run_parallel(self, targets, work, result: ReconciliationResult, cancel_event) -> None:
        def task(employee_id: int):
            if cancel_event is not None and cancel_event.is_set():
                return None
            try:
                return work(employee_id)
            except Exception as exc:
                logger.error("Reconciliation failed for employee %s", employee_id, exc_info=True)
                return EmployeeError(employee_id, type(exc).__name__, str(exc))

        with ThreadPoolExecutor(max_workers=self._settings.max_workers) as pool:
            futures = {employee_id: pool.submit(task, employee_id) for employee_id in targets}
            for employee_id in targets:
                outcome = futures[employee_id].result()
                if outcome is None:
                    result.pending_employee_ids.append(employee_id)
                elif isinstance(outcome, EmployeeError):
                    result.errors.append(outcome)
                else:
                    result.add(outcome)

        if result.pending_employee_ids:
            result.cancelled = True
            logger.warning("Reconciliation cancelled, %s employee(s) pending", len(result.pending_employee_ids))
