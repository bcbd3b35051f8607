from school_admin.core.models.school import School
from school_admin.core.models.class_model import SchoolClass
from school_admin.core.models.subject import Subject
from school_admin.core.models.master_subject import MasterSubject
from school_admin.core.models.teacher import Teacher
from school_admin.core.models.teacher_class_assignment import TeacherClassAssignment
from school_admin.core.models.class_teacher_assignment import ClassTeacherAssignment
from school_admin.core.models.student import Student
from school_admin.core.models.timetable import TimetableSlot
from school_admin.core.models.attendance import AttendanceRecord

__all__ = [
    "AttendanceRecord",
    "ClassTeacherAssignment",
    "MasterSubject",
    "School",
    "SchoolClass",
    "Student",
    "Subject",
    "Teacher",
    "TeacherClassAssignment",
    "TimetableSlot",
]
