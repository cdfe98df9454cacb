"""ASGI entrypoint for the freezer tracker API."""

from freezer_tracker.api.app import create_app
from freezer_tracker.containers import build_container

app = create_app(build_container())
