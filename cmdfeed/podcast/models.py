"""In-memory representation of subscribed podcasts."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..subscription.state import SubscriptionState


@dataclass
class PodcastOptions:
    """Per-podcast settings.

    Attributes:
        download_directory: Where downloaded episodes are stored, if anywhere.
        recent_entries: How many of the newest entries to consider, if limited.
    """

    download_directory: Optional[str] = None
    recent_entries: Optional[int] = None


@dataclass
class Podcast:
    """A podcast subscription stored under a user-chosen slug.

    `downloaded` maps entry identity to the local path of its artifact.
    """

    slug: str
    subscription: SubscriptionState
    downloaded: Dict[str, str] = field(default_factory=dict)
    options: PodcastOptions = field(default_factory=PodcastOptions)
