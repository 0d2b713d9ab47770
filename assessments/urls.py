from django.urls import path
from .views import (
    StudentResultsView, ClassRankingView, StudentAnalyticsView,
    TeacherResultsView, ResultDetailView, ExamRankingView
)

urlpatterns = [
    # --- Student ---
    path('results/student/', StudentResultsView.as_view(), name='student-results'),
    path('results/class-ranking/', ClassRankingView.as_view(), name='class-ranking'),
    path('results/analytics/', StudentAnalyticsView.as_view(), name='student-analytics'),

    # --- Teacher ---
    path('results/teacher/', TeacherResultsView.as_view(), name='teacher-results'),

    # --- Shared ---
    path('results/exam/<int:exam_id>/student/<int:student_id>/', ResultDetailView.as_view(), name='result-detail'),
    path('results/exam/<int:exam_id>/ranking/', ExamRankingView.as_view(), name='exam-ranking'),
]
