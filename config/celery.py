"""
Celery application for asynchronous notification and reporting tasks.
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('stockroom')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
