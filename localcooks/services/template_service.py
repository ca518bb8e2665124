# localcooks/services/template_service.py
"""
Template rendering for outbound email.

Templates live in ``localcooks/templates`` and are addressed by their path
relative to that directory (``email/checkout_cleared.html``).
"""

from datetime import datetime
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..core.config import settings
from ..core.constants import BRAND_NAME

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def _currency(cents: Any) -> str:
    try:
        return f"${int(cents) / 100:,.2f}"
    except (TypeError, ValueError):
        return "$0.00"


def _format_date(value: Any, format_str: str = "%B %d, %Y") -> str:
    if not value:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime(format_str)
    return str(value)


class TemplateService:
    """Jinja2 environment with the platform's common context and filters."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["currency"] = _currency
        self.env.filters["format_date"] = _format_date

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "frontend_url": settings.frontend_url,
            "support_email": settings.admin_email,
        }

    def render_template(
        self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any
    ) -> str:
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            logger.error(f"Template not found: {template_name}")
            raise
        full_context = self.get_common_context()
        if context:
            full_context.update(context)
        full_context.update(kwargs)
        return template.render(full_context)
