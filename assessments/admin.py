from django.contrib import admin

from .models import ExamResult, StudentAnswer


class StudentAnswerInline(admin.TabularInline):
    model = StudentAnswer
    extra = 0
    can_delete = False
    readonly_fields = ('question', 'student_answer', 'is_correct', 'marks_obtained')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ExamResult)
class ExamResultAdmin(admin.ModelAdmin):
    list_display = ('exam', 'student', 'score', 'percentage', 'status', 'submitted_at')
    list_filter = ('status',)
    search_fields = ('exam__title', 'student__email')
    # Results are write-once; the admin is for inspection only
    readonly_fields = ('exam', 'student', 'score', 'total_marks', 'percentage', 'time_taken', 'submitted_at', 'status')
    inlines = [StudentAnswerInline]

    def has_add_permission(self, request):
        return False
