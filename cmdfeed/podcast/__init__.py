"""Podcast subscriptions stored by slug."""

from .codec import decode_podcast, encode_podcast
from .models import Podcast, PodcastOptions
from .registry import PODCAST_NAMESPACE, PodcastRegistry

__all__ = [
    "Podcast",
    "PodcastOptions",
    "PodcastRegistry",
    "PODCAST_NAMESPACE",
    "decode_podcast",
    "encode_podcast",
]
