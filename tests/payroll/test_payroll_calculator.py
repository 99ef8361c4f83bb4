from datetime import date, datetime, timezone

from hrms.attendance.model import AttendanceRecord
from hrms.common.datetime_utils import day_start
from hrms.core.enums import AttendanceStatus, UserType
from hrms.payroll.calculator.standard_calculator import StandardPayrollCalculator
from hrms.users.model import CompensationProfile


def _day(d: int, status: AttendanceStatus, hours: float = 8.0) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=d,
        user_id=7,
        user_type=UserType.EMPLOYEE,
        date=day_start(date(2024, 6, d)),
        status=status,
        total_hours=hours,
    )


def _june_records():
    # June 2024 has 20 working days
    records = [_day(d, AttendanceStatus.PRESENT) for d in (3, 4, 5, 6, 7, 10, 11, 12, 13, 14, 17, 18, 19)]
    records.append(_day(20, AttendanceStatus.LATE, hours=10.0))
    records.append(_day(21, AttendanceStatus.RE_CHECKED_IN, hours=8.25))
    records += [_day(24, AttendanceStatus.HALF_DAY, hours=4.0), _day(25, AttendanceStatus.HALF_DAY, hours=4.0)]
    records.append(_day(26, AttendanceStatus.LEAVE, hours=0.0))
    return records


PROFILE = CompensationProfile(
    basic_salary=20000,
    housing=3000,
    transport=1000,
    overtime_rate=150,
    tax_rate=10,
    insurance_rate=5,
)


def test_summary_counts_and_derives_absent_days():
    summary = StandardPayrollCalculator().summarize(_june_records(), month=6, year=2024, profile=PROFILE)

    assert summary.total_days == 20
    assert summary.present_days == 15
    assert summary.half_days == 2
    assert summary.leave_days == 1
    assert summary.absent_days == 2
    # 2h on the 20th + 0.25h on the 21st; half-days never count
    assert summary.overtime_hours == 2.25


def test_breakdown_components():
    calc = StandardPayrollCalculator()
    summary = calc.summarize(_june_records(), month=6, year=2024, profile=PROFILE)
    b = calc.compute(profile=PROFILE, summary=summary)

    assert b.allowances.total == 4000
    assert b.deductions.absent == 2000
    assert b.deductions.half_day == 1000
    assert b.deductions.tax == 2000
    assert b.deductions.insurance == 1000
    assert b.deductions.other == 0
    assert b.overtime.amount == 337.5
    assert b.net_pay == 20000 + 4000 + 337.5 - 6000


def test_profile_threshold_and_eligibility():
    records = [_day(3, AttendanceStatus.PRESENT, hours=10.0)]
    calc = StandardPayrollCalculator(default_daily_hours=8)

    tall = CompensationProfile(basic_salary=1000, standard_daily_hours=9)
    assert calc.summarize(records, month=6, year=2024, profile=tall).overtime_hours == 1.0

    ineligible = CompensationProfile(basic_salary=1000, overtime_eligible=False)
    assert calc.summarize(records, month=6, year=2024, profile=ineligible).overtime_hours == 0.0


def test_absent_days_never_negative():
    records = [_day(d, AttendanceStatus.PRESENT) for d in range(1, 31)]
    summary = StandardPayrollCalculator().summarize(records, month=6, year=2024, profile=PROFILE)
    assert summary.absent_days == 0


def test_components_rounded_half_up():
    profile = CompensationProfile(basic_salary=10000, tax_rate=0, insurance_rate=0)
    calc = StandardPayrollCalculator()
    # February 2024: 21 working days -> daily rate 476.190476...
    records = [
        AttendanceRecord(
            attendance_id=1,
            user_id=7,
            user_type=UserType.EMPLOYEE,
            date=datetime(2024, 2, 1, tzinfo=timezone.utc),
            status=AttendanceStatus.HALF_DAY,
        )
    ]
    summary = calc.summarize(records, month=2, year=2024, profile=profile)
    b = calc.compute(profile=profile, summary=summary)

    assert summary.absent_days == 20
    assert b.deductions.half_day == 238.10
    assert b.deductions.absent == 9523.81
    assert b.net_pay == round(10000 - 9523.81 - 238.10, 2)
