"""Jinja2-backed InvoiceRenderer."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from storefront.application.download_invoice import InvoiceRenderer
from storefront.application.dto import OrderDTO

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
INVOICE_TEMPLATE = "invoice.html"


class Jinja2InvoiceRenderer(InvoiceRenderer):

    def __init__(self, template_dir: Path = TEMPLATE_DIR, store_name: str = "Caper Sports") -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._store_name = store_name

    def render(self, order: OrderDTO) -> str:
        template = self._env.get_template(INVOICE_TEMPLATE)
        return template.render(
            order=order,
            store_name=self._store_name,
            status_class=order.order_status.replace("_", "-"),
        )
