"""Landing-page renderer: PageSpec → self-contained HTML document."""

import datetime
import logging
from pathlib import Path
from typing import List, NamedTuple, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.models.page_spec import PageSpec

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "landing_page.html"

PLACEHOLDER_HERO_IMAGE = "https://via.placeholder.com/1200x600?text=No+Hero+Image"

# Used for any carousel slot the PageSpec leaves empty
DEFAULT_TESTIMONIAL_IMAGES = (
    "https://media.istockphoto.com/id/1329039896/photo/young-doctor-asking-senior-impaired-"
    "male-patient-in-wheelchair-to-sign-insurance-policy-at.jpg?s=612x612&w=0&k=20"
    "&c=R4upVNBIIfZY3biFdivbrRei-paJuiQuLwYlkxx0dto=",
    "https://picsum.photos/80/80?random=203",
    "https://picsum.photos/80/80?random=201",
)

_TESTIMONIAL_COPY = (
    ("Dr. {name} is simply the best. I felt cared for from the moment I walked in!", "Happy Patient"),
    ("I wouldn't trust anyone else with my family's needs.", "Satisfied Family"),
    ("Professional, caring, and highly experienced. 10/10 recommend!", "Grateful Patient"),
)

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


class NavLink(NamedTuple):
    href: str
    label: str


class Testimonial(NamedTuple):
    image: str
    quote: str
    author: str


def carousel_images(images: List[str]) -> List[str]:
    """Return exactly three carousel images; empty slots take the matching default."""
    return [
        images[i] if i < len(images) and images[i] else default
        for i, default in enumerate(DEFAULT_TESTIMONIAL_IMAGES)
    ]


def _testimonials(spec: PageSpec) -> List[Testimonial]:
    return [
        Testimonial(image=image, quote=quote.format(name=spec.subject.name), author=author)
        for image, (quote, author) in zip(carousel_images(spec.testimonial_images), _TESTIMONIAL_COPY)
    ]


def render_landing_page(spec: PageSpec, year: Optional[int] = None) -> str:
    """Render *spec* into the landing-page template.

    Output is deterministic for a given *spec* and *year*; *year* defaults
    to the current year and only appears in the footer.
    """
    template = _env.get_template(TEMPLATE_NAME)
    html = template.render(
        name=spec.subject.name,
        niche=spec.niche,
        nav_links=[NavLink(href=link, label=link.replace("-", " ", 1)) for link in spec.nav_links],
        hero_image=spec.images[0] if spec.images and spec.images[0] else PLACEHOLDER_HERO_IMAGE,
        specializations=spec.subject.specializations,
        achievements=spec.subject.achievements,
        description=spec.subject.description,
        testimonials=_testimonials(spec),
        faqs=spec.faqs,
        year=year or datetime.date.today().year,
    )
    logger.info("Rendered landing page", extra={"subject": spec.subject.name, "bytes": len(html)})
    return html
