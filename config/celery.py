# config/celery.py

import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('swipeshop')

# Settings with the CELERY_ prefix configure the app
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()
