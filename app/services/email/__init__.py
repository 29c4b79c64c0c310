"""
Email module.

Structure:
- client.py: HTTP email API client (test mode, timeout, best effort)
- templates.py: Template subjects and bodies
"""

from app.services.email.client import EmailClient
from app.services.email.templates import TEMPLATES, render_template

__all__ = ["EmailClient", "TEMPLATES", "render_template"]
