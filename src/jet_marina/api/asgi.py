"""ASGI entrypoint for the marina API."""

from jet_marina.api.app import create_app
from jet_marina.containers import build_container

app = create_app(build_container())
