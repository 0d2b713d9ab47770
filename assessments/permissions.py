from rest_framework import permissions


class IsTeacher(permissions.BasePermission):
    """
    Allows access to teachers only.
    Strictly blocks Students.
    """
    message = 'Teacher access required.'

    def has_permission(self, request, view):
        # 1. User must be logged in
        if not request.user or not request.user.is_authenticated:
            return False

        # 2. Check Role
        return getattr(request.user, 'role', '') == 'teacher'


class IsStudent(permissions.BasePermission):
    message = 'Student access required.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return getattr(request.user, 'role', '') == 'student'


class IsExamOwner(permissions.BasePermission):
    """Object-level check: only the teacher who created the exam may change it."""
    message = 'Only the teacher who owns this exam can do that.'

    def has_object_permission(self, request, view, obj):
        exam = getattr(obj, 'exam', obj)
        return exam.teacher_id == request.user.id
