import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

app = Celery("pricing_engine")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks(related_name="application.tasks")
