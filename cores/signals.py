from django.dispatch import Signal

# Sent after commit. Hooks for reminders and notices live outside this project.

# Teacher created an exam. Args: exam.
exam_created = Signal()

# A submission was graded. Args: exam_result.
result_graded = Signal()

# A certificate was issued for a passed result. Args: certificate.
certificate_issued = Signal()
