"""Run the OCI Auth backend with uvicorn: ``python -m oci_auth``."""
import uvicorn

from oci_auth.config import get_config

# Settings names that uvicorn spells differently.
_UVICORN_LEVELS = {"warn": "warning", "off": "critical"}


def main() -> None:
    config = get_config()
    uvicorn.run(
        "oci_auth.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=_UVICORN_LEVELS.get(config.logging.level, config.logging.level),
    )


if __name__ == "__main__":
    main()
