from django.contrib import admin

from .models import Exam, Question


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    fields = ('order', 'text', 'question_type', 'options', 'correct_answer', 'points')

    # obj is the parent exam; its bank is frozen once anyone has taken it
    def has_add_permission(self, request, obj=None):
        return super().has_add_permission(request, obj) and not (obj and obj.has_results)

    def has_change_permission(self, request, obj=None):
        return super().has_change_permission(request, obj) and not (obj and obj.has_results)

    def has_delete_permission(self, request, obj=None):
        return super().has_delete_permission(request, obj) and not (obj and obj.has_results)


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ('title', 'subject', 'teacher', 'start_time', 'end_time', 'is_active')
    list_filter = ('is_active', 'subject')
    search_fields = ('title', 'subject')
    inlines = [QuestionInline]

    def get_readonly_fields(self, request, obj=None):
        readonly = super().get_readonly_fields(request, obj)
        if obj is not None and obj.has_results:
            return tuple(readonly) + ('title', 'description', 'subject', 'duration_minutes',
                                      'total_marks', 'passing_marks', 'start_time', 'end_time', 'teacher')
        return readonly

    def has_delete_permission(self, request, obj=None):
        return super().has_delete_permission(request, obj) and not (obj and obj.has_results)
