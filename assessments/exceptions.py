from rest_framework import status


class SubmissionRejected(Exception):
    """Expected, user-facing refusal of a submission. Nothing is written."""
    code = 'rejected'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Submission rejected.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_payload(self):
        return {'error': self.message, 'code': self.code}


class AlreadyTaken(SubmissionRejected):
    code = 'already_taken'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'You have already taken this exam.'


class NotYetOpen(SubmissionRejected):
    code = 'not_yet_open'
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'This exam has not started yet.'


class Expired(SubmissionRejected):
    code = 'expired'
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'The submission window for this exam has closed.'


class ExamInactive(SubmissionRejected):
    code = 'exam_inactive'
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'This exam is not active.'


class ExamNotFound(SubmissionRejected):
    code = 'exam_not_found'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Exam not found.'


class MalformedSubmission(SubmissionRejected):
    code = 'malformed_submission'
    default_message = 'The submitted answers are malformed.'


class TransientSubmissionError(Exception):
    """Storage failed mid-submission; everything was rolled back and a retry is safe."""
    code = 'transient_failure'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def as_payload(self):
        return {'error': 'Submission could not be saved, please retry.', 'code': self.code}
