from rest_framework import serializers
from .models import ExamResult, StudentAnswer

class StudentAnswerSerializer(serializers.ModelSerializer):
    question_text = serializers.CharField(source='question.text', read_only=True)
    question_type = serializers.CharField(source='question.question_type', read_only=True)
    options = serializers.JSONField(source='question.options', read_only=True)
    correct_answer = serializers.CharField(source='question.correct_answer', read_only=True)
    points = serializers.IntegerField(source='question.points', read_only=True)

    class Meta:
        model = StudentAnswer
        fields = [
            'id', 'question', 'question_text', 'question_type', 'options', 'correct_answer',
            'points', 'student_answer', 'is_correct', 'marks_obtained'
        ]
        read_only_fields = fields

class ExamResultSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists / dashboard history."""
    exam_title = serializers.CharField(source='exam.title', read_only=True)
    subject = serializers.CharField(source='exam.subject', read_only=True)
    passing_marks = serializers.IntegerField(source='exam.passing_marks', read_only=True)
    student_name = serializers.CharField(source='student.display_name', read_only=True)
    student_roll = serializers.CharField(source='student.roll_number', read_only=True)
    certificate_number = serializers.SerializerMethodField()

    class Meta:
        model = ExamResult
        fields = [
            'id', 'exam', 'exam_title', 'subject', 'passing_marks', 'student', 'student_name',
            'student_roll', 'score', 'total_marks', 'percentage', 'time_taken', 'submitted_at',
            'status', 'certificate_number'
        ]
        read_only_fields = fields

    def get_certificate_number(self, obj):
        certificate = getattr(obj, 'certificate', None)
        return certificate.certificate_number if certificate else None

class ExamResultDetailSerializer(ExamResultSerializer):
    """Heavy serializer for a single result. Includes graded ANSWERS."""
    answers = StudentAnswerSerializer(many=True, read_only=True)

    class Meta(ExamResultSerializer.Meta):
        fields = ExamResultSerializer.Meta.fields + ['answers']
        read_only_fields = fields

# --- Rankings (plain records, not models) ---

class RankingEntrySerializer(serializers.Serializer):
    rank = serializers.IntegerField()
    student_id = serializers.IntegerField()
    student_name = serializers.CharField()
    student_roll = serializers.CharField(source='roll_number')
    percentage = serializers.DecimalField(max_digits=6, decimal_places=2)
    time_taken = serializers.IntegerField(source='elapsed_minutes')
    status = serializers.CharField()

class StudentStandingSerializer(serializers.Serializer):
    rank = serializers.IntegerField()
    student_id = serializers.IntegerField()
    student_name = serializers.CharField()
    student_roll = serializers.CharField(source='roll_number')
    average_percentage = serializers.DecimalField(max_digits=6, decimal_places=2)
    total_exams = serializers.IntegerField()
    passed_exams = serializers.IntegerField()
    total_students = serializers.IntegerField()
