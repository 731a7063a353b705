"""Metadata infrastructure - Spotify Web API provider."""

from discord_music_queue.infrastructure.metadata.spotify_client import SpotifyMetadataProvider

__all__ = ["SpotifyMetadataProvider"]
