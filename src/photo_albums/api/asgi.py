"""ASGI entrypoint for the photo albums API."""

from photo_albums.api.app import create_app
from photo_albums.containers import build_container

app = create_app(build_container())
