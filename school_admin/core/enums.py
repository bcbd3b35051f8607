from enum import Enum


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
