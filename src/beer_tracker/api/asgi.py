"""ASGI entrypoint for the beer tracker API."""

from beer_tracker.api.app import create_app
from beer_tracker.containers import build_container

app = create_app(build_container())
