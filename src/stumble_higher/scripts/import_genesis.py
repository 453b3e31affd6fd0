"""Import the curated genesis collection.

Loads a JSON list of ``{title, url|link, author, description}`` entries,
infers category, tags, difficulty and a time estimate for each, and inserts
them as pre-approved resources owned by the synthetic genesis user.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stumble_higher.core.settings import settings
from stumble_higher.db.session import SessionLocal
from stumble_higher.models import Resource, User
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED

logger = logging.getLogger(__name__)

GENESIS_USERNAME = "genesis"
GENESIS_REPUTATION = 1000
GENESIS_QUALITY_SCORE = 5.0
MAX_GENESIS_TAGS = 5
BATCH_SIZE = 50

# Checked in order against the lowercased url.
URL_CATEGORIES = (
    ("youtube.com", "videos"),
    ("youtu.be", "videos"),
    ("vimeo.com", "videos"),
    ("ted.com", "videos"),
    ("tools", "tools"),
    ("app", "tools"),
    ("software", "tools"),
    ("research", "research"),
    ("paper", "research"),
    ("study", "research"),
    ("academic", "research"),
    ("philosophy", "philosophy"),
    ("article", "articles"),
    ("blog", "articles"),
    ("essay", "articles"),
)

TITLE_CATEGORIES = (
    (("video", "talk", "documentary"), "videos"),
    (("tool", "app", "software"), "tools"),
    (("research", "study", "paper"), "research"),
    (("article", "essay"), "articles"),
    (("philosophy",), "philosophy"),
)

KEYWORD_TAGS = {
    "creative": ("creative", "art", "design"),
    "business": ("business", "entrepreneurship"),
    "technology": ("technology", "programming"),
    "psychology": ("psychology", "mindset"),
    "productivity": ("productivity", "habits"),
    "leadership": ("leadership", "management"),
    "philosophy": ("philosophy", "wisdom"),
    "science": ("science", "research"),
    "education": ("educational", "learning"),
    "inspiring": ("inspiring", "motivational"),
    "practical": ("practical", "actionable"),
    "deep": ("deep", "thoughtful"),
}

CATEGORY_TAGS = {
    "videos": ("visual", "engaging"),
    "tools": ("practical", "useful"),
    "research": ("deep", "academic"),
    "philosophy": ("thoughtful", "wisdom"),
    "books": ("educational", "comprehensive"),
    "articles": ("insightful", "thought-provoking"),
}

ADVANCED_MARKERS = ("advanced", "expert", "master", "academic", "research", "complex")
BEGINNER_MARKERS = ("beginner", "intro", "start", "basics", "simple", "easy")

VIDEO_HOSTS = ("youtube.com", "youtu.be", "vimeo")


@dataclass
class ImportReport:
    """Counts from one import run."""

    inserted: int = 0
    skipped_invalid: int = 0
    skipped_duplicate: int = 0


def _text(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return value.strip() if isinstance(value, str) else ""


def entry_url(entry: Mapping[str, Any]) -> str:
    return _text(entry, "link") or _text(entry, "url")


def infer_category(entry: Mapping[str, Any]) -> str:
    title = _text(entry, "title").lower()
    author = _text(entry, "author").lower()
    url = entry_url(entry).lower()

    for pattern, category in URL_CATEGORIES:
        if pattern in url:
            return category
    for markers, category in TITLE_CATEGORIES:
        if any(marker in title for marker in markers):
            return category
    if "blog" in url:
        return "articles"
    if "philosopher" in author:
        return "philosophy"
    return "books"


def infer_tags(entry: Mapping[str, Any], category: str) -> list[str]:
    content = " ".join(
        _text(entry, key).lower() for key in ("title", "author", "description")
    )
    tags: list[str] = []
    for keyword, keyword_tags in KEYWORD_TAGS.items():
        if keyword in content:
            tags.extend(keyword_tags)
    tags.extend(CATEGORY_TAGS.get(category, ()))
    return list(dict.fromkeys(tags))[:MAX_GENESIS_TAGS]


def infer_difficulty(entry: Mapping[str, Any]) -> str:
    content = f"{_text(entry, 'title')} {_text(entry, 'author')}".lower()
    if any(marker in content for marker in ADVANCED_MARKERS):
        return "advanced"
    if any(marker in content for marker in BEGINNER_MARKERS):
        return "beginner"
    return "intermediate"


def estimate_minutes(entry: Mapping[str, Any]) -> int:
    """Midpoint of the typical consumption time for the kind of content."""
    title = _text(entry, "title").lower()
    url = entry_url(entry).lower()
    if any(host in url for host in VIDEO_HOSTS):
        return 37
    if any(word in title for word in ("book", "guide", "handbook")):
        return 270
    if any(word in title for word in ("article", "essay", "blog")):
        return 15
    if any(word in title for word in ("tool", "app")):
        return 25
    return 45


def ensure_genesis_user(db: Session) -> User:
    user = db.get(User, settings.genesis_user_id)
    if user is None:
        user = User(
            id=settings.genesis_user_id,
            username=GENESIS_USERNAME,
            display_name="Genesis Collection",
            is_genesis=True,
            reputation_score=GENESIS_REPUTATION,
        )
        db.add(user)
        db.flush()
        logger.info("Created genesis user %s", user.id)
    return user


def build_resource(entry: Mapping[str, Any], genesis_user_id: str) -> Resource | None:
    """Return an approved genesis resource, or None if title or url is missing."""
    title = _text(entry, "title")
    url = entry_url(entry)
    if not title or not url:
        return None

    category = infer_category(entry)
    return Resource(
        title=title,
        author=_text(entry, "author") or None,
        url=url,
        description=_text(entry, "description") or None,
        category=category,
        tags=infer_tags(entry, category),
        difficulty_level=infer_difficulty(entry),
        estimated_time_minutes=estimate_minutes(entry),
        submitted_by=genesis_user_id,
        submission_amount=0.0,
        status=RESOURCE_STATUS_APPROVED,
        is_genesis=True,
        quality_score=GENESIS_QUALITY_SCORE,
    )


def import_entries(db: Session, entries: Iterable[Mapping[str, Any]]) -> ImportReport:
    """Insert genesis resources, skipping invalid entries and known urls."""
    report = ImportReport()
    genesis = ensure_genesis_user(db)
    known_urls = {url for (url,) in db.query(Resource.url)}

    pending = 0
    for index, entry in enumerate(entries, start=1):
        resource = build_resource(entry, genesis.id)
        if resource is None:
            logger.warning("Skipping entry %d: missing title or url", index)
            report.skipped_invalid += 1
            continue
        if resource.url in known_urls:
            report.skipped_duplicate += 1
            continue

        known_urls.add(resource.url)
        db.add(resource)
        report.inserted += 1
        pending += 1
        if pending >= BATCH_SIZE:
            db.flush()
            pending = 0

    genesis.total_submissions = (genesis.total_submissions or 0) + report.inserted
    db.commit()
    return report


def load_entries(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list")
    return [entry for entry in data if isinstance(entry, dict)]


def main() -> None:
    parser = argparse.ArgumentParser(description="Import the genesis resource collection")
    parser.add_argument("path", type=Path, help="Path to resources.json")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        entries = load_entries(args.path)
        with SessionLocal() as db:
            report = import_entries(db, entries)
    except (OSError, ValueError, SQLAlchemyError) as exc:
        print(f"[import_genesis] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    print(
        f"[import_genesis] inserted={report.inserted} "
        f"invalid={report.skipped_invalid} duplicate={report.skipped_duplicate}"
    )


if __name__ == "__main__":
    main()
