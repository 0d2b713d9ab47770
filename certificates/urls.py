from django.urls import path
from .views import (
    StudentCertificateListView, CertificateInventoryView,
    CertificateDetailView, RevokeCertificateView
)

urlpatterns = [
    path('certificates/', StudentCertificateListView.as_view(), name='student-certificates'),
    path('certificates/<str:certificate_number>/', CertificateDetailView.as_view(), name='certificate-detail'),
    path('certificates/<str:certificate_number>/revoke/', RevokeCertificateView.as_view(), name='certificate-revoke'),
    path('admin/certificates/', CertificateInventoryView.as_view(), name='admin-certificates'),
]
