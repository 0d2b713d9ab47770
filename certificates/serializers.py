from rest_framework import serializers
from .models import Certificate

class CertificateSerializer(serializers.ModelSerializer):
    # Fetch details from the related result to show readable names
    student_name = serializers.CharField(source='exam_result.student.display_name', read_only=True)
    student_email = serializers.CharField(source='exam_result.student.email', read_only=True)
    exam_title = serializers.CharField(source='exam_result.exam.title', read_only=True)
    subject = serializers.CharField(source='exam_result.exam.subject', read_only=True)
    teacher_name = serializers.CharField(source='exam_result.exam.teacher.display_name', read_only=True)
    percentage = serializers.DecimalField(source='exam_result.percentage', max_digits=6, decimal_places=2, read_only=True)

    class Meta:
        model = Certificate
        fields = [
            'id',
            'certificate_number',
            'student_name',
            'student_email',
            'exam_title',
            'subject',
            'teacher_name',
            'percentage',
            'issued_date',
            'status',
            'revoked_at',
            'verification_url'
        ]
        read_only_fields = fields
