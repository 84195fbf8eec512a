"""ASGI entrypoint for the checkout API."""

from vpn_checkout.api.app import create_app
from vpn_checkout.containers import build_container

app = create_app(build_container())
