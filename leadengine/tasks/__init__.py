"""Celery application and maintenance tasks."""
