"""
Academics views package.

- base: access helpers shared with other apps
- classes: class CRUD, subject allocation and rosters
- subjects: subject CRUD
- attendance: daily registers
"""
from .base import get_teacher_or_forbid, ensure_class_access
from .classes import class_list, class_detail, class_subjects, class_subject_detail, class_students
from .subjects import subject_list, subject_detail
from .attendance import attendance
