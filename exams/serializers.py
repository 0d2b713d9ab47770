# examination_system/exams/serializers.py
from django.db import transaction
from rest_framework import serializers
from .models import Exam, Question

# --- Question Serializers ---

QUESTION_TYPE_ALIASES = {
    'multiple_choice': Question.QuestionType.SINGLE_CHOICE,
    'mcq': Question.QuestionType.SINGLE_CHOICE,
}

class QuestionSerializer(serializers.ModelSerializer):
    """Full question including the canonical answer. Teacher-facing only."""
    # Map frontend 'question_text' to backend 'text'
    question_text = serializers.CharField(source='text')
    options = serializers.ListField(child=serializers.CharField(), required=False)
    points = serializers.IntegerField(min_value=1)

    class Meta:
        model = Question
        fields = ['id', 'question_text', 'question_type', 'options', 'correct_answer', 'points', 'order']
        read_only_fields = ['order']

    def to_internal_value(self, data):
        # Normalize question type names used by older clients
        q_type = data.get('question_type') if hasattr(data, 'get') else None
        if q_type in QUESTION_TYPE_ALIASES:
            data = {**data, 'question_type': QUESTION_TYPE_ALIASES[q_type]}
        return super().to_internal_value(data)

    def validate_correct_answer(self, value):
        if not value.strip():
            raise serializers.ValidationError('A correct answer is required.')
        return value

    def validate(self, attrs):
        q_type = attrs.get('question_type')
        options = [opt.strip() for opt in attrs.get('options', []) if opt.strip()]
        if q_type in Question.CHOICE_TYPES:
            if q_type == Question.QuestionType.SINGLE_CHOICE and len(options) < 2:
                raise serializers.ValidationError({'options': 'Single choice questions need at least two options.'})
            if options and attrs['correct_answer'].strip() not in options:
                raise serializers.ValidationError({'correct_answer': 'The correct answer must be one of the options.'})
        else:
            # Free-text kinds carry no options
            options = []
        attrs['options'] = options
        return attrs

class StudentQuestionSerializer(serializers.ModelSerializer):
    """What a candidate sees while taking the exam: no correct answer."""
    question_text = serializers.CharField(source='text', read_only=True)

    class Meta:
        model = Question
        fields = ['id', 'question_text', 'question_type', 'options', 'points', 'order']
        read_only_fields = fields

# --- Exam Serializers ---

class ExamSerializer(serializers.ModelSerializer):
    questions = QuestionSerializer(many=True)
    teacher_name = serializers.CharField(source='teacher.display_name', read_only=True)
    # Read-only counts
    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'subject', 'duration_minutes',
            'total_marks', 'passing_marks', 'start_time', 'end_time',
            'is_active', 'teacher', 'teacher_name', 'total_questions',
            'questions', 'created_at', 'updated_at'
        ]
        read_only_fields = ['teacher', 'created_at', 'updated_at']

    def validate_duration_minutes(self, value):
        if not 1 <= value <= 600:
            raise serializers.ValidationError('Duration must be between 1 and 600 minutes.')
        return value

    def validate_questions(self, value):
        if not value:
            raise serializers.ValidationError('At least one question is required.')
        return value

    def validate(self, attrs):
        if attrs['passing_marks'] > attrs['total_marks']:
            raise serializers.ValidationError({'passing_marks': 'Passing marks cannot exceed total marks.'})
        if attrs['start_time'] >= attrs['end_time']:
            raise serializers.ValidationError({'end_time': 'End time must be after start time.'})
        # A bank worth more than the total would allow percentages above 100
        if sum(question['points'] for question in attrs['questions']) > attrs['total_marks']:
            raise serializers.ValidationError({'questions': 'Question points cannot add up to more than total marks.'})
        return attrs

    def create(self, validated_data):
        questions_data = validated_data.pop('questions')
        with transaction.atomic():
            exam = Exam.objects.create(**validated_data)
            Question.objects.bulk_create([
                Question(exam=exam, order=index, **question)
                for index, question in enumerate(questions_data, start=1)
            ])
        return exam

class ExamUpdateSerializer(serializers.ModelSerializer):
    """Teachers may only touch title, description and the active flag."""

    class Meta:
        model = Exam
        fields = ['id', 'title', 'description', 'is_active']

    def validate(self, attrs):
        exam = self.instance
        if exam is not None and exam.has_results:
            changed = {
                field for field, value in attrs.items()
                if getattr(exam, field) != value
            }
            reactivating = attrs.get('is_active') is True and not exam.is_active
            if changed - {'is_active'} or reactivating:
                raise serializers.ValidationError(
                    'This exam has been taken by students; it can only be deactivated.'
                )
        return attrs

class TeacherExamListSerializer(serializers.ModelSerializer):
    total_questions = serializers.IntegerField(read_only=True)
    total_students = serializers.IntegerField(read_only=True)
    passed_students = serializers.IntegerField(read_only=True)
    average_score = serializers.DecimalField(max_digits=6, decimal_places=2, read_only=True, allow_null=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'subject', 'duration_minutes', 'total_marks', 'passing_marks',
            'start_time', 'end_time', 'is_active', 'total_questions',
            'total_students', 'passed_students', 'average_score', 'created_at'
        ]

class ExamListSerializer(serializers.ModelSerializer):
    """Candidate listing with the student's own status for each exam."""
    teacher_name = serializers.CharField(source='teacher.display_name', read_only=True)
    status = serializers.SerializerMethodField()
    student_score = serializers.SerializerMethodField()
    student_percentage = serializers.SerializerMethodField()

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'subject', 'duration_minutes', 'total_marks',
            'passing_marks', 'start_time', 'end_time', 'teacher_name',
            'status', 'student_score', 'student_percentage'
        ]

    def _result(self, obj):
        return self.context.get('results', {}).get(obj.id)

    def get_status(self, obj):
        if self._result(obj) is not None:
            return 'completed'
        return obj.window_status(self.context['now'])

    def get_student_score(self, obj):
        result = self._result(obj)
        return str(result.score) if result else None

    def get_student_percentage(self, obj):
        result = self._result(obj)
        return str(result.percentage) if result else None

class StudentExamDetailSerializer(serializers.ModelSerializer):
    """Detailed view for candidates"""
    teacher_name = serializers.CharField(source='teacher.display_name', read_only=True)
    questions = StudentQuestionSerializer(many=True, read_only=True)

    class Meta:
        model = Exam
        fields = [
            'id', 'title', 'description', 'subject', 'duration_minutes', 'total_marks',
            'passing_marks', 'start_time', 'end_time', 'teacher_name', 'questions'
        ]

# --- Submission Serializers ---

class AnswerSubmitSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    answer = serializers.CharField(allow_blank=True, required=False, default='')

class ExamSubmitSerializer(serializers.Serializer):
    answers = AnswerSubmitSerializer(many=True)
    time_taken = serializers.IntegerField(min_value=0)
