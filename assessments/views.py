from decimal import Decimal

from django.db.models import Avg, Count, Q
from django.shortcuts import get_object_or_404
from rest_framework import permissions, status, views
from rest_framework.response import Response

from exams.models import Exam
from .grading import TWO_PLACES, round_half_up
from .models import ExamResult, StudentAnswer
from .permissions import IsStudent, IsTeacher
from .ranking import RankingService
from .serializers import (
    ExamResultSerializer, ExamResultDetailSerializer,
    RankingEntrySerializer, StudentStandingSerializer
)


def summarize(results):
    """Pass/fail counts and average percentage for a list of results."""
    total = len(results)
    passed = sum(1 for result in results if result.status == ExamResult.Status.PASSED)
    average = sum((result.percentage for result in results), Decimal('0')) / total if total else Decimal('0')
    return {
        "total": total,
        "passed": passed,
        "failed": total - passed,
        "pass_rate": round_half_up(Decimal(passed) / total * 100, TWO_PLACES) if total else Decimal('0.00'),
        "average_score": round_half_up(average, TWO_PLACES),
    }


def _round(value):
    return round_half_up(Decimal(str(value)), TWO_PLACES) if value is not None else None


# --- STUDENT VIEWS ---

class StudentResultsView(views.APIView):
    """All results of the logged-in student with overall statistics."""
    permission_classes = [IsStudent]

    def get(self, request):
        results = list(
            ExamResult.objects.filter(student=request.user)
            .select_related('exam', 'student', 'certificate')
            .order_by('-submitted_at')
        )
        stats = summarize(results)
        return Response({
            "results": ExamResultSerializer(results, many=True).data,
            "statistics": {
                "total_exams": stats["total"],
                "passed_exams": stats["passed"],
                "failed_exams": stats["failed"],
                "pass_rate": stats["pass_rate"],
                "average_score": stats["average_score"],
            },
        })

class ClassRankingView(views.APIView):
    """Cross-exam leaderboard plus the caller's own standing."""
    permission_classes = [IsStudent]

    def get(self, request):
        ranking = RankingService().class_ranking()
        standing = next((row for row in ranking if row.student_id == request.user.id), None)
        return Response({
            "class_ranking": StudentStandingSerializer(ranking, many=True).data,
            "student_rank": StudentStandingSerializer(standing).data if standing else None,
        })

class StudentAnalyticsView(views.APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        results = ExamResult.objects.filter(student=request.user)

        by_subject = (
            results.values('exam__subject')
            .annotate(
                total_exams=Count('id'),
                average_percentage=Avg('percentage'),
                passed_exams=Count('id', filter=Q(status=ExamResult.Status.PASSED)),
            )
            .order_by('-average_percentage')
        )
        recent = results.select_related('exam').order_by('-submitted_at')[:10]
        by_question_type = (
            StudentAnswer.objects.filter(exam_result__student=request.user)
            .values('question__question_type')
            .annotate(
                total_questions=Count('id'),
                average_marks=Avg('marks_obtained'),
                correct_answers=Count('id', filter=Q(is_correct=True)),
            )
            .order_by('question__question_type')
        )

        return Response({
            "subject_performance": [
                {
                    "subject": row['exam__subject'],
                    "total_exams": row['total_exams'],
                    "average_percentage": _round(row['average_percentage']),
                    "passed_exams": row['passed_exams'],
                }
                for row in by_subject
            ],
            "time_performance": [
                {
                    "exam_title": result.exam.title,
                    "subject": result.exam.subject,
                    "percentage": result.percentage,
                    "submitted_at": result.submitted_at,
                }
                for result in recent
            ],
            "question_type_performance": [
                {
                    "question_type": row['question__question_type'],
                    "total_questions": row['total_questions'],
                    "average_marks": _round(row['average_marks']),
                    "correct_answers": row['correct_answers'],
                }
                for row in by_question_type
            ],
        })


# --- TEACHER VIEWS ---

class TeacherResultsView(views.APIView):
    """Results for every exam the teacher owns, grouped per exam with statistics."""
    permission_classes = [IsTeacher]

    def get(self, request):
        results = (
            ExamResult.objects.filter(exam__teacher=request.user)
            .select_related('exam', 'student', 'certificate')
            .order_by('-submitted_at')
        )
        grouped = {}
        for result in results:
            entry = grouped.setdefault(result.exam_id, {
                "exam_title": result.exam.title,
                "subject": result.exam.subject,
                "total_marks": result.exam.total_marks,
                "passing_marks": result.exam.passing_marks,
                "results": [],
            })
            entry["results"].append(result)

        payload = {}
        for exam_id, entry in grouped.items():
            exam_results = entry.pop("results")
            stats = summarize(exam_results)
            payload[exam_id] = {
                **entry,
                "students": ExamResultSerializer(exam_results, many=True).data,
                "statistics": {
                    "total_students": stats["total"],
                    "passed_students": stats["passed"],
                    "failed_students": stats["failed"],
                    "pass_rate": stats["pass_rate"],
                    "average_score": stats["average_score"],
                },
            }
        return Response({"exam_results": payload})


# --- SHARED VIEWS ---

class ResultDetailView(views.APIView):
    """One student's result for one exam with graded answers and certificate."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, exam_id, student_id):
        user = request.user
        if user.is_student and student_id != user.id:
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
        if user.is_teacher and not Exam.objects.filter(pk=exam_id, teacher=user).exists():
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)

        result = get_object_or_404(
            ExamResult.objects.select_related('exam', 'student', 'certificate')
            .prefetch_related('answers__question'),
            exam_id=exam_id,
            student_id=student_id,
        )
        certificate = getattr(result, 'certificate', None)
        return Response({
            "result": ExamResultDetailSerializer(result).data,
            "certificate": {
                "certificate_number": certificate.certificate_number,
                "issued_date": certificate.issued_date,
                "status": certificate.status,
                "verification_url": certificate.verification_url,
            } if certificate else None,
        })

class ExamRankingView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, exam_id):
        exam = get_object_or_404(Exam, pk=exam_id)
        user = request.user
        if user.is_teacher and exam.teacher_id != user.id:
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
        if user.is_student and not ExamResult.objects.filter(exam=exam, student=user).exists():
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)

        ranking = RankingService().rank_within_exam(exam.pk)
        return Response({
            "exam_id": exam.pk,
            "exam_title": exam.title,
            "ranking": RankingEntrySerializer(ranking, many=True).data,
        })
