from datetime import date
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from typing import Dict, Any

from config.settings import settings
from schemas.grades import ACHIEVEMENT_LABELS, AchievementLevel

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class PDFService:
    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )

    def _render_template(self, template_name: str, data: Dict[str, Any]) -> str:
        """Render a template to HTML"""
        template = self.env.get_template(template_name)
        return template.render(**data)

    def _html_to_pdf(self, html_content: str) -> bytes:
        """HTML -> PDF"""
        # imported here: weasyprint needs pango at import time
        import weasyprint

        base_url = settings.WEASYPRINT_FONT_DIR or str(TEMPLATE_DIR)
        return weasyprint.HTML(string=html_content, base_url=base_url).write_pdf()

    def report_card_html(self, draft: Dict[str, Any], issued: date = None) -> str:
        items = [
            {
                **item,
                "levelLabel": ACHIEVEMENT_LABELS.get(AchievementLevel(item["achievementLevel"]), ""),
            }
            for item in draft.get("items", [])
        ]
        return self._render_template("report_card.html", {
            "card": draft,
            "items": items,
            "issued": (issued or date.today()).isoformat(),
        })

    def generate_report_card_pdf(self, draft: Dict[str, Any]) -> bytes:
        """Report card ("boleta") PDF"""
        return self._html_to_pdf(self.report_card_html(draft))


pdf_service = PDFService()


def get_pdf_service() -> PDFService:
    return pdf_service
