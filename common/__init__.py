"""
Shared helpers for the membership purchase backend.

Holds the error taxonomy used by every app.  All errors derive from DRF's
``APIException`` so the framework's exception handler is the single
place user-visible error responses are produced.
"""
