from django.core.management.base import BaseCommand

from infra_setup import setup_all


class Command(BaseCommand):
    help = "Create the DynamoDB tables, change topic and queue if missing."

    def handle(self, *args, **options):
        result = setup_all()
        self.stdout.write(self.style.SUCCESS("Infrastructure setup completed successfully."))
        self.stdout.write(f"Tables: {', '.join(result['tables'])}")
        self.stdout.write(f"Changes Queue URL: {result['queue_url']}")
        self.stdout.write(f"SNS Topic ARN: {result['topic_arn']}")
