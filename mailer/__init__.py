"""
Mailer app package.

Renders plain-text notification templates and sends them through
Django's email backend from a Celery worker.  Callers enqueue messages
with ``mailer.dispatch.mail_task`` and never wait for delivery.
"""
