"""
Resource wrappers for the Venice API endpoints.
"""

from .api_keys import APIKeysResource
from .audio import AudioResource
from .base import APIResource
from .billing import BillingResource
from .characters import CharactersResource
from .chat import ChatResource
from .embeddings import EmbeddingsResource
from .images import ImagesResource
from .models import ModelsResource
from .vvv import VVVResource

__all__ = [
    "APIKeysResource",
    "APIResource",
    "AudioResource",
    "BillingResource",
    "CharactersResource",
    "ChatResource",
    "EmbeddingsResource",
    "ImagesResource",
    "ModelsResource",
    "VVVResource",
]
