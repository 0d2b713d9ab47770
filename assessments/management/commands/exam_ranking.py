from django.core.management.base import BaseCommand, CommandError

from assessments.ranking import RankingService
from exams.models import Exam


class Command(BaseCommand):
    help = 'Prints the ranking of an exam, or the cross-exam class ranking with --class'

    def add_arguments(self, parser):
        parser.add_argument('exam_id', nargs='?', type=int, help='The exam to rank')
        parser.add_argument('--class', action='store_true', dest='class_ranking',
                            help='Rank students by their average across all exams')
        parser.add_argument('--database', default='default', help='Database alias to read from')

    def handle(self, *args, **options):
        service = RankingService(using=options['database'])

        if options['class_ranking']:
            standings = service.class_ranking()
            if not standings:
                self.stdout.write(self.style.WARNING("No graded results yet."))
                return
            for row in standings:
                self.stdout.write(
                    f"{row.rank:>3}. {row.student_name:<30} {row.average_percentage:>6}% "
                    f"({row.passed_exams}/{row.total_exams} passed)"
                )
            return

        exam_id = options['exam_id']
        if exam_id is None:
            raise CommandError("Give an exam id or use --class.")
        try:
            exam = Exam.objects.using(options['database']).get(pk=exam_id)
        except Exam.DoesNotExist:
            raise CommandError(f"Exam {exam_id} not found!")

        entries = service.rank_within_exam(exam.pk)
        self.stdout.write(self.style.SUCCESS(f"Ranking for {exam.title} ({len(entries)} students)"))
        for entry in entries:
            self.stdout.write(
                f"{entry.rank:>3}. {entry.student_name:<30} {entry.percentage:>6}% "
                f"{entry.elapsed_minutes:>4} min  {entry.status}"
            )
