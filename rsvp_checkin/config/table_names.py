from enum import Enum


class TableNames(str, Enum):
    ATTENDANCE_RECORDS = "attendance_records"
