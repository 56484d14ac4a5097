"""Run the development server: ``python -m library_app``."""
from __future__ import annotations

from library_app import config as app_config
from library_app import create_app


def main() -> None:
    app = create_app()
    app.run(host=app_config.server_host(), port=app_config.server_port(), threaded=True)


if __name__ == "__main__":
    main()
