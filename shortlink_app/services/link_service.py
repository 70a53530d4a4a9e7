import hmac
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shortlink_app.models.link import Link, LINK_ACTIVE
from shortlink_app.services.errors import LinkPersistenceError, SlugConflictError
from shortlink_app.services.expiry import format_timestamp, parse_expiry, parse_timestamp, utcnow
from shortlink_app.services.slugs import RandomSlugGenerator

logger = logging.getLogger(__name__)


class LinkState(Enum):
    ACTIVE = "active"
    DISABLED = "disabled"
    EXPIRED = "expired"


def _is_unique_violation(error: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed", PostgreSQL: "... violates unique constraint",
    # MySQL: "Duplicate entry"
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class LinkService:
    """
    Store access for both handlers.

    Existence checks before an insert are advisory only. Two concurrent
    creations can both pass them; the UNIQUE constraint on ``links.slug``
    decides, and its violation is reported as ``SlugConflictError``.
    """

    def __init__(self, db: Session, slug_generator: Optional[RandomSlugGenerator] = None):
        self.db = db
        self.slug_generator = slug_generator or RandomSlugGenerator()

    def get_by_slug(self, slug: str) -> Optional[Link]:
        return self.db.query(Link).filter(Link.slug == slug).first()

    def get_by_url(self, url: str) -> Optional[Link]:
        return self.db.query(Link).filter(Link.url == url).first()

    @staticmethod
    def link_state(link: Link, now: Optional[datetime] = None) -> LinkState:
        """
        Status first, then expiry. A disabled link reports DISABLED even
        when it has also expired.
        """
        if link.status != LINK_ACTIVE:
            return LinkState.DISABLED

        if link.expires_at:
            expires_at = parse_timestamp(link.expires_at)
            if expires_at is not None and expires_at < (now or utcnow()):
                return LinkState.EXPIRED

        return LinkState.ACTIVE

    @staticmethod
    def password_matches(link: Link, provided: Optional[str]) -> bool:
        """True when the link has no access password or ``provided`` equals it."""
        if not link.password:
            return True
        if provided is None:
            return False
        return hmac.compare_digest(link.password.encode(), provided.encode())

    def create_link(
        self,
        url: str,
        slug: Optional[str] = None,
        expiry: Any = None,
        password: Optional[str] = None,
        ip: str = "",
        ua: str = "",
        now: Optional[datetime] = None,
    ) -> Tuple[Link, bool]:
        """
        Create or reuse a mapping.

        Args:
            url: Validated target URL
            slug: Validated custom slug, None to reuse or generate one
            expiry: Raw expiry value from the request
            password: Access password to store on the link
            ip, ua: Provenance of the creating request
            now: Creation time, defaults to the current UTC time

        Returns:
            (link, created). ``created`` is False when an existing row was
            returned: same slug and URL, or same URL without a custom slug.

        Raises:
            SlugConflictError: slug is taken by a different URL
            LinkPersistenceError: insert failed for another database reason
        """
        if slug:
            existing = self.get_by_slug(slug)
            if existing is not None:
                if existing.url == url:
                    return existing, False
                raise SlugConflictError(slug)
        else:
            existing = self.get_by_url(url)
            if existing is not None:
                return existing, False

        now = now or utcnow()
        new_slug = slug or self.slug_generator.generate()
        link = Link(
            url=url,
            slug=new_slug,
            ip=ip,
            status=LINK_ACTIVE,
            ua=ua,
            create_time=format_timestamp(now),
            expires_at=parse_expiry(expiry, now),
            password=password or None,
        )
        self.db.add(link)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_unique_violation(e):
                raise SlugConflictError(new_slug) from e
            raise LinkPersistenceError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise LinkPersistenceError(str(e)) from e

        self.db.refresh(link)
        logger.info("Created link %s -> %s", link.slug, link.url)
        return link, True
