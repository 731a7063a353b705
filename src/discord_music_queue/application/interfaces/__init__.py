"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_music_queue.application.interfaces.audio_provider import AudioProvider, TrackMetadata
from discord_music_queue.application.interfaces.metadata_provider import MetadataProvider
from discord_music_queue.application.interfaces.voice_transport import VoiceTransport

__all__ = [
    "AudioProvider",
    "MetadataProvider",
    "TrackMetadata",
    "VoiceTransport",
]
