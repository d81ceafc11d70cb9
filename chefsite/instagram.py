"""Instagram feed with an explicit cache value.

The caller owns the cache: :func:`get_feed` receives the previous
:class:`FeedCache` (or ``None``) and returns the one to keep, so no state is
shared between callers. Fetching is injected; this module performs no
network I/O.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from pydantic import BaseModel

from .logs import get_logger
from .models import utcnow
from .site_settings import SiteSettings

logger = get_logger(__name__)

PLACEHOLDER_CAPTION = "Sample Instagram post. Connect your Instagram account in the admin settings."


class InstagramPost(BaseModel):
    id: str
    image_url: str
    caption: str = ""
    permalink: str
    timestamp: datetime


FeedFetcher = Callable[[str], list[InstagramPost]]


@dataclass(frozen=True)
class FeedCache:
    """Posts fetched at ``fetched_at``."""

    posts: list[InstagramPost] = field(default_factory=list)
    fetched_at: datetime = field(default_factory=utcnow)

    def is_fresh(self, ttl_minutes: int, now: Optional[datetime] = None) -> bool:
        """True while the cache holds posts younger than ``ttl_minutes``."""
        now = now or utcnow()
        return bool(self.posts) and now - self.fetched_at < timedelta(minutes=ttl_minutes)


def get_feed_fetcher() -> Optional[FeedFetcher]:
    """
    Dependency providing the Instagram client.

    No client ships with the data layer; the application overrides this
    dependency to enable fetching. Until then the feed shows placeholders.
    """
    return None


def placeholder_posts(count: int, now: Optional[datetime] = None) -> list[InstagramPost]:
    """Posts shown until an access token is configured or when fetching fails."""
    now = now or utcnow()
    return [
        InstagramPost(
            id=f"placeholder-{i}",
            image_url="/placeholder.svg",
            caption=PLACEHOLDER_CAPTION,
            permalink="#",
            timestamp=now,
        )
        for i in range(max(count, 0))
    ]


def get_feed(
    settings: SiteSettings,
    cache: Optional[FeedCache],
    fetch: Optional[FeedFetcher],
    now: Optional[datetime] = None,
) -> tuple[list[InstagramPost], Optional[FeedCache]]:
    """
    Return the posts to display and the cache to keep.

    Args:
        settings (SiteSettings): Supplies token, display count and cache time.
        cache (FeedCache | None): Cache returned by the previous call.
        fetch (Callable | None): Called with the access token when the cache
            is missing or stale. Without one, placeholders are shown.
        now (datetime | None): Current time, defaults to UTC now.

    Returns:
        tuple: At most ``display_count`` posts and the cache to pass next time.
    """
    config = settings.instagram
    now = now or utcnow()
    if not config.access_token or fetch is None:
        return placeholder_posts(config.display_count, now), cache

    if cache is not None and cache.is_fresh(config.cache_time, now):
        return cache.posts[: config.display_count], cache

    try:
        posts = fetch(config.access_token)
    except Exception as exc:
        logger.error("instagram_fetch_failed", error=str(exc))
        return placeholder_posts(config.display_count, now), cache

    fresh = FeedCache(posts=list(posts), fetched_at=now)
    return fresh.posts[: config.display_count], fresh
