# certificates/views.py
from rest_framework import generics, permissions, status, views
from rest_framework.response import Response
from .issuer import CertificateIssuer
from .models import Certificate
from .serializers import CertificateSerializer

CERTIFICATE_RELATIONS = ('exam_result__exam__teacher', 'exam_result__student')


def can_view(user, certificate):
    result = certificate.exam_result
    return user.is_staff or result.student_id == user.id or result.exam.teacher_id == user.id


class StudentCertificateListView(generics.ListAPIView):
    """List all certificates owned by the logged-in student."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = CertificateSerializer

    def get_queryset(self):
        return Certificate.objects.filter(
            exam_result__student=self.request.user
        ).select_related(*CERTIFICATE_RELATIONS).order_by('-issued_date')


class CertificateInventoryView(generics.ListAPIView):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = CertificateSerializer
    queryset = Certificate.objects.select_related(*CERTIFICATE_RELATIONS).order_by('-issued_date')


class CertificateDetailView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, certificate_number):
        try:
            certificate = CertificateIssuer().verify(certificate_number)
        except Certificate.DoesNotExist:
            return Response({"error": "Certificate not found"}, status=status.HTTP_404_NOT_FOUND)
        if not can_view(request.user, certificate):
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
        return Response({"certificate": CertificateSerializer(certificate).data})


class RevokeCertificateView(views.APIView):
    """The exam's teacher (or staff) withdraws a certificate."""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, certificate_number):
        issuer = CertificateIssuer()
        try:
            certificate = issuer.verify(certificate_number)
        except Certificate.DoesNotExist:
            return Response({"error": "Certificate not found"}, status=status.HTTP_404_NOT_FOUND)
        if not (request.user.is_staff or certificate.exam_result.exam.teacher_id == request.user.id):
            return Response({"error": "Access denied"}, status=status.HTTP_403_FORBIDDEN)
        issuer.revoke(certificate, actor=request.user)
        return Response({"certificate": CertificateSerializer(certificate).data})
