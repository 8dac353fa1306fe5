from datetime import date, datetime, time

from src.attendance_reconciler.attendance_reconciler.core.enums import WarningCode
from src.attendance_reconciler.attendance_reconciler.grouping.grouper import GroupingSettings, ShiftGrouper
from src.attendance_reconciler.attendance_reconciler.scans.model import ScanRecord
from src.attendance_reconciler.attendance_reconciler.schedules.model import NoSchedule, ShiftWindow

D = date(2024, 3, 1)


def _window(day, time_in, time_out, *, grace=15, rest=False, site_id=None):
    return ShiftWindow(
        employee_id=1,
        reference_date=day,
        scheduled_time_in=time_in,
        scheduled_time_out=time_out,
        grace_period_minutes=grace,
        is_rest_day=rest,
        site_id=site_id,
    )


def _scans(*stamps, site_id=None):
    return [
        ScanRecord(record_id=i + 1, raw_name="Dela Cruz Juan", scanned_at=ts, site_id=site_id, employee_id=1)
        for i, ts in enumerate(stamps)
    ]


def _days(start, count):
    return [date.fromordinal(start.toordinal() + i) for i in range(count)]


def _group(scans, resolutions, *, emit_start=D, emit_end=D, **settings):
    grouper = ShiftGrouper(GroupingSettings(**settings))
    return grouper.group(
        employee_id=1, scans=scans, resolutions=resolutions, emit_start=emit_start, emit_end=emit_end
    )


def _codes(instance):
    return [w.code for w in instance.warnings]


def test_day_shift_pairs_first_and_last_scan():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}
    scans = _scans(datetime(2024, 3, 1, 17, 2), datetime(2024, 3, 1, 8, 5), datetime(2024, 3, 1, 12, 0))

    result = _group(scans, resolutions)

    (instance,) = result.instances
    assert instance.time_in.scanned_at == datetime(2024, 3, 1, 8, 5)
    assert instance.time_out.scanned_at == datetime(2024, 3, 1, 17, 2)
    assert [s.scanned_at for s in instance.extra_scans] == [datetime(2024, 3, 1, 12, 0)]
    assert WarningCode.EXTRA_SCANS in _codes(instance)
    assert result.unmatched == ()


def test_overnight_shift_yields_one_instance_on_start_date():
    days = _days(D, 2)
    resolutions = {d: _window(d, time(22, 0), time(6, 0)) for d in days}
    scans = _scans(datetime(2024, 3, 1, 21, 55), datetime(2024, 3, 2, 6, 10))

    result = _group(scans, resolutions, emit_start=days[0], emit_end=days[1])

    first, second = result.instances
    assert first.reference_date == D
    assert first.time_in.scanned_at == datetime(2024, 3, 1, 21, 55)
    assert first.time_out.scanned_at == datetime(2024, 3, 2, 6, 10)
    assert second.time_in is None and second.time_out is None


def test_each_scan_is_bound_at_most_once():
    days = _days(D, 3)
    resolutions = {d: _window(d, time(22, 0), time(6, 0)) for d in days}
    stamps = [
        datetime(2024, 3, 1, 21, 58),
        datetime(2024, 3, 2, 6, 3),
        datetime(2024, 3, 2, 21, 50),
        datetime(2024, 3, 3, 5, 40),
        datetime(2024, 3, 3, 22, 10),
        datetime(2024, 3, 4, 9, 0),
    ]

    result = _group(_scans(*stamps), resolutions, emit_start=days[0], emit_end=days[2])

    bound = [s.record_id for i in result.instances for s in i.scans]
    assert len(bound) == len(set(bound))
    assert len(bound) + len(result.unmatched) == len(stamps)
    assert [i.time_in.scanned_at.hour for i in result.instances] == [21, 21, 22]


def test_duplicate_scans_collapse():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}
    scans = _scans(datetime(2024, 3, 1, 8, 0), datetime(2024, 3, 1, 8, 0), datetime(2024, 3, 1, 17, 0))

    (instance,) = _group(scans, resolutions).instances

    assert instance.extra_scans == ()
    assert instance.time_in.record_id == 1
    assert instance.time_out.record_id == 3


def test_single_scan_before_midpoint_is_time_in():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}

    (instance,) = _group(_scans(datetime(2024, 3, 1, 8, 20)), resolutions).instances

    assert instance.time_in is not None
    assert instance.time_out is None


def test_single_scan_after_midpoint_is_time_out():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}

    (instance,) = _group(_scans(datetime(2024, 3, 1, 16, 0)), resolutions).instances

    assert instance.time_in is None
    assert instance.time_out.scanned_at == datetime(2024, 3, 1, 16, 0)


def test_double_punch_keeps_one_scan():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}
    scans = _scans(datetime(2024, 3, 1, 8, 1), datetime(2024, 3, 1, 8, 4))

    (instance,) = _group(scans, resolutions).instances

    assert instance.time_in.scanned_at == datetime(2024, 3, 1, 8, 1)
    assert instance.time_out is None
    assert len(instance.extra_scans) == 1
    assert WarningCode.DOUBLE_PUNCH in _codes(instance)


def test_scan_outside_every_window_is_unmatched():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}
    scans = _scans(datetime(2024, 3, 1, 3, 0), datetime(2024, 3, 1, 8, 0), datetime(2024, 3, 1, 17, 0))

    result = _group(scans, resolutions, lead_window_minutes=0, tail_window_minutes=60)

    assert [s.scanned_at for s in result.unmatched] == [datetime(2024, 3, 1, 3, 0)]


def test_lead_window_zero_uses_grace_only():
    resolutions = {D: _window(D, time(8, 0), time(17, 0), grace=10)}
    scans = _scans(datetime(2024, 3, 1, 7, 49), datetime(2024, 3, 1, 7, 50))

    result = _group(scans, resolutions, lead_window_minutes=0, double_punch_minutes=0)

    assert [s.scanned_at for s in result.unmatched] == [datetime(2024, 3, 1, 7, 49)]
    assert result.instances[0].time_in.scanned_at == datetime(2024, 3, 1, 7, 50)


def test_rest_day_without_scans_has_no_punches():
    resolutions = {D: _window(D, time(8, 0), time(17, 0), rest=True)}

    (instance,) = _group([], resolutions).instances

    assert instance.is_rest_day
    assert not instance.has_scans


def test_no_schedule_date_keeps_its_scans_as_extras():
    resolutions = {D: NoSchedule(employee_id=1, reference_date=D)}
    scans = _scans(datetime(2024, 3, 1, 9, 0), datetime(2024, 3, 1, 18, 0))

    result = _group(scans, resolutions)

    (instance,) = result.instances
    assert instance.window is None
    assert len(instance.extra_scans) == 2
    assert result.unmatched == ()


def test_equidistant_scan_goes_to_earlier_date_with_conflict():
    # 12h shifts back to back: a 20:00 scan is 12h from both scheduled time-ins
    days = _days(D, 2)
    resolutions = {d: _window(d, time(8, 0), time(20, 0)) for d in days}
    scans = _scans(datetime(2024, 3, 1, 8, 0), datetime(2024, 3, 1, 20, 0), datetime(2024, 3, 2, 8, 0))

    result = _group(scans, resolutions, emit_start=days[0], emit_end=days[1], lead_window_minutes=720)

    first, second = result.instances
    assert first.time_out.scanned_at == datetime(2024, 3, 1, 20, 0)
    assert len(first.conflicts) == 1
    assert first.conflicts[0].candidate_dates == (days[0], days[1])
    assert second.conflicts == first.conflicts
    assert second.time_in.scanned_at == datetime(2024, 3, 2, 8, 0)


def test_cross_site_punches_are_flagged():
    resolutions = {D: _window(D, time(8, 0), time(17, 0), site_id=1)}
    scans = [
        ScanRecord(record_id=1, raw_name="x", scanned_at=datetime(2024, 3, 1, 8, 0), site_id=1, employee_id=1),
        ScanRecord(record_id=2, raw_name="x", scanned_at=datetime(2024, 3, 1, 17, 0), site_id=2, employee_id=1),
    ]

    (instance,) = _group(scans, resolutions).instances

    assert instance.is_cross_site
    assert WarningCode.CROSS_SITE in _codes(instance)
    assert WarningCode.CROSS_SITE_CONFLICT not in _codes(instance)


def test_impossible_travel_is_a_conflict():
    resolutions = {D: _window(D, time(8, 0), time(17, 0))}
    scans = [
        ScanRecord(record_id=1, raw_name="x", scanned_at=datetime(2024, 3, 1, 8, 0), site_id=1, employee_id=1),
        ScanRecord(record_id=2, raw_name="x", scanned_at=datetime(2024, 3, 1, 8, 12), site_id=2, employee_id=1),
        ScanRecord(record_id=3, raw_name="x", scanned_at=datetime(2024, 3, 1, 17, 0), site_id=2, employee_id=1),
    ]

    (instance,) = _group(scans, resolutions).instances

    assert WarningCode.CROSS_SITE_CONFLICT in _codes(instance)


def test_next_day_window_competes_for_scans_outside_the_emit_range():
    # 22:00-06:00 on D, then 08:00-17:00 on D+1: the morning scans are nearer the day shift.
    days = _days(D, 2)
    resolutions = {
        days[0]: _window(days[0], time(22, 0), time(6, 0)),
        days[1]: _window(days[1], time(8, 0), time(17, 0)),
    }
    scans = _scans(
        datetime(2024, 3, 1, 21, 58),
        datetime(2024, 3, 2, 6, 5),
        datetime(2024, 3, 2, 7, 55),
        datetime(2024, 3, 2, 17, 3),
    )

    narrow = _group(scans, resolutions, emit_start=D, emit_end=D)
    wide = _group(scans, resolutions, emit_start=D, emit_end=days[1])

    (night,) = narrow.instances
    assert night == wide.instances[0]
    assert night.time_in.scanned_at == datetime(2024, 3, 1, 21, 58)
    assert night.time_out is None
    assert night.extra_scans == ()
    assert narrow.unmatched == ()
    assert wide.instances[1].time_in.scanned_at == datetime(2024, 3, 2, 6, 5)
    assert wide.instances[1].time_out.scanned_at == datetime(2024, 3, 2, 17, 3)
