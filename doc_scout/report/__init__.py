# File: doc_scout/report/__init__.py
"""doc_scout.report: Генерация отчётов (JSON и HTML) для CLI."""

from __future__ import annotations

from .html_report import DEFAULT_TEMPLATE_DIR, render_html
from .json_report import render_json

__all__ = ["DEFAULT_TEMPLATE_DIR", "render_json", "render_html"]
