import sys

import uvicorn

from snapsync.config.settings import FatalStartupError, ProxySettings
from snapsync.logging.logger import Log
from snapsync.proxy.app import create_app


def main() -> None:
    """Entry point: validate config -> build app -> serve."""
    settings = ProxySettings()
    Log.configure(settings.log_level)
    try:
        settings.ensure_required()
    except FatalStartupError as exc:
        Log.error(str(exc), component="Startup")
        sys.exit(1)

    Log.info(
        f"Serving {settings.github_owner}/{settings.github_repo} with "
        f"{len(settings.github_tokens)} credential(s) on port {settings.port}",
        component="Proxy",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
