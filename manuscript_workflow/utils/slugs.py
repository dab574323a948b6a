"""원고 제목으로부터 고유한 slug를 만드는 헬퍼입니다."""

import re
import unicodedata
from typing import Optional

from sqlalchemy.orm import Session

from manuscript_workflow.models.article import Article

_NON_WORD_RE = re.compile(r"[^\w\s-]", flags=re.UNICODE)
_SEPARATOR_RE = re.compile(r"[\s_-]+")


def slugify(title: str) -> str:
    text = unicodedata.normalize("NFKC", str(title or "")).strip().lower()
    text = _NON_WORD_RE.sub("", text)
    text = _SEPARATOR_RE.sub("-", text).strip("-")
    return text[:200] or "article"


def generate_unique_slug(db: Session, title: str, current_article_id: Optional[int] = None) -> str:
    """이미 쓰인 slug면 -2, -3 ... 을 붙여 충돌을 피한다."""
    base_slug = slugify(title)
    candidate = base_slug
    counter = 2
    while True:
        existing = db.query(Article.article_id).filter(Article.slug == candidate).first()
        if existing is None or existing[0] == current_article_id:
            return candidate
        candidate = f"{base_slug}-{counter}"
        counter += 1
