from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication & profile ---
    path('api/', include('users.urls')),

    # --- Exams: authoring, taking, submitting ---
    path('api/', include('exams.urls')),

    # --- Results, rankings & analytics ---
    path('api/', include('assessments.urls')),

    # --- Certificates ---
    path('api/', include('certificates.urls')),

    # --- Event log for notification collaborators ---
    path('api/', include('cores.urls')),
]
