"""ASGI entrypoint for the joydrop API."""

from joydrop.api.app import create_app
from joydrop.containers import build_container

app = create_app(build_container())
