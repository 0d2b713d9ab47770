import logging

from django.db import transaction
from django.db.models import Avg, Count, Q
from django.utils import timezone
from rest_framework import viewsets, permissions, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Exam
from .serializers import (
    ExamSerializer, ExamUpdateSerializer, TeacherExamListSerializer,
    ExamListSerializer, StudentExamDetailSerializer, ExamSubmitSerializer
)
from assessments.exceptions import SubmissionRejected, TransientSubmissionError
from assessments.ledger import ResultLedger
from assessments.models import ExamResult
from assessments.permissions import IsTeacher, IsStudent, IsExamOwner
from assessments.serializers import ExamResultSerializer
from cores.models import AuditLog
from cores.signals import exam_created

logger = logging.getLogger(__name__)


class ExamViewSet(viewsets.ModelViewSet):
    http_method_names = ['get', 'post', 'patch', 'put', 'delete', 'head', 'options']

    # Enable search on title and subject
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'subject']

    def get_queryset(self):
        user = self.request.user
        if getattr(user, 'is_teacher', False):
            queryset = Exam.objects.filter(teacher=user)
            if self.action == 'list':
                queryset = queryset.annotate(
                    total_questions=Count('questions', distinct=True),
                    total_students=Count('results__student', distinct=True),
                    passed_students=Count(
                        'results', filter=Q(results__status=ExamResult.Status.PASSED), distinct=True
                    ),
                    average_score=Avg('results__percentage'),
                )
            return queryset.order_by('-created_at')
        # Students only ever see active exams
        return Exam.objects.filter(is_active=True).select_related('teacher').order_by('start_time')

    def get_serializer_class(self):
        if self.action == 'create':
            return ExamSerializer
        if self.action in ['update', 'partial_update']:
            return ExamUpdateSerializer
        if self.action == 'submit':
            return ExamSubmitSerializer
        if self.action == 'available':
            return ExamListSerializer
        if self.action == 'list':
            if getattr(self.request.user, 'is_teacher', False):
                return TeacherExamListSerializer
            return ExamListSerializer
        if getattr(self.request.user, 'is_teacher', False):
            return ExamSerializer
        return StudentExamDetailSerializer

    def get_permissions(self):
        if self.action in ['create']:
            return [IsTeacher()]
        if self.action in ['update', 'partial_update', 'destroy']:
            return [IsTeacher(), IsExamOwner()]
        if self.action in ['available', 'submit']:
            return [IsStudent()]
        return [permissions.IsAuthenticated()]

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['now'] = timezone.now()
        user = self.request.user
        if getattr(user, 'is_student', False) and self.action in ['list', 'available']:
            context['results'] = {
                result.exam_id: result
                for result in ExamResult.objects.filter(student=user)
            }
        return context

    def perform_create(self, serializer):
        exam = serializer.save(teacher=self.request.user)
        AuditLog.record(
            AuditLog.Action.EXAM_CREATED,
            exam,
            actor=self.request.user,
            details=f"Created exam '{exam.title}' ({exam.start_time:%Y-%m-%d %H:%M} - {exam.end_time:%Y-%m-%d %H:%M})",
        )
        transaction.on_commit(lambda: exam_created.send(sender=Exam, exam=exam))
        logger.info("Teacher %s created exam %s", self.request.user.pk, exam.pk)

    def perform_update(self, serializer):
        exam = serializer.save()
        AuditLog.record(
            AuditLog.Action.EXAM_UPDATED,
            exam,
            actor=self.request.user,
            details=f"Updated exam '{exam.title}' (active={exam.is_active})",
        )

    def destroy(self, request, *args, **kwargs):
        exam = self.get_object()
        if exam.has_results:
            return Response(
                {"error": "Cannot delete exam that has been taken by students. Consider deactivating instead."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        AuditLog.record(
            AuditLog.Action.EXAM_DELETED,
            exam,
            actor=request.user,
            details=f"Deleted exam '{exam.title}'",
        )
        exam.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    def retrieve(self, request, *args, **kwargs):
        exam = self.get_object()
        if request.user.is_student and ExamResult.objects.filter(exam=exam, student=request.user).exists():
            return Response({"error": "You have already taken this exam"}, status=status.HTTP_400_BAD_REQUEST)
        serializer = self.get_serializer(exam)
        return Response(serializer.data)

    @action(detail=False, methods=['get'], url_path='available')
    def available(self, request):
        """Active exams with the student's own status: completed, upcoming, available or expired."""
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response({"exams": serializer.data})

    @action(detail=True, methods=['post'], url_path='submit')
    def submit(self, request, pk=None):
        """
        Receives answers from the student, grades them and records the result.
        Payload: { "answers": [ { "question_id": 1, "answer": "A" }, ... ], "time_taken": 42 }
        """
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "The submitted answers are malformed.", "code": "malformed_submission",
                 "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = ResultLedger().submit(
                pk,
                request.user,
                serializer.validated_data['answers'],
                serializer.validated_data['time_taken'],
            )
        except SubmissionRejected as rejection:
            return Response(rejection.as_payload(), status=rejection.status_code)
        except TransientSubmissionError as exc:
            return Response(exc.as_payload(), status=exc.status_code)

        certificate = getattr(result, 'certificate', None) if result.is_passed else None
        return Response({
            "message": "Exam submitted successfully",
            "result": ExamResultSerializer(result).data,
            "correct_answers": result.report.correct_count,
            "total_questions": result.report.total_questions,
            "certificate_number": certificate.certificate_number if certificate else None,
        }, status=status.HTTP_201_CREATED)
