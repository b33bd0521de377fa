"""Configuration for Redis, Celery and Google Cloud Storage."""
