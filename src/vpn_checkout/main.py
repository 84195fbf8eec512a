"""Command-line entrypoint that serves the checkout API."""

import uvicorn

from vpn_checkout.api.app import create_app
from vpn_checkout.config import Settings
from vpn_checkout.containers import build_container


def main() -> None:
    """Run the API with uvicorn on the configured port."""
    settings = Settings()
    app = create_app(build_container(settings))
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)  # noqa: S104


if __name__ == "__main__":
    main()
