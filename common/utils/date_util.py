import time
from datetime import datetime, timezone

NANOS_PER_SECOND = 1_000_000_000


def get_now_timestamp_ns() -> int:
    """
    Get the current timestamp in nanoseconds
    """
    return time.time_ns()


def get_datetime_of_timestamp_ns(timestamp_ns: int) -> datetime:
    """
    Convert nanosecond timestamp to an UTC datetime, dropping the sub-second part
    1714521600123456789 -> 2024-05-01 00:00:00+00:00

    @param timestamp_ns: timestamp in nanoseconds
    @return: datetime
    """
    return datetime.fromtimestamp(timestamp_ns // NANOS_PER_SECOND, tz=timezone.utc)


def get_fixed_width_str_of_timestamp_ns(timestamp_ns: int) -> str:
    """
    Convert nanosecond timestamp to a fixed width, sortable string
    1714521600123456789 -> "20240501000000123456789"

    @param timestamp_ns: timestamp in nanoseconds
    @return: year, month, day, hour, minute, second and 9 digits of nanoseconds
    """
    date_obj = get_datetime_of_timestamp_ns(timestamp_ns)
    return f"{date_obj.strftime('%Y%m%d%H%M%S')}{timestamp_ns % NANOS_PER_SECOND:09d}"


def get_now_fixed_width_str() -> str:
    """
    Get the current UTC time as a fixed width, sortable string
    """
    return get_fixed_width_str_of_timestamp_ns(get_now_timestamp_ns())
