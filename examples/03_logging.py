"""
Logging Examples

The library logs under the ``request_publisher`` logger and is silent
until configure_logging() installs handlers.
"""

import tempfile
from pathlib import Path

from request_publisher import LoggingConfig, PublisherFactory, configure_logging


def console_text_logging():
    print("\n=== Text logging to console ===")

    configure_logging(LoggingConfig.create(level="DEBUG", format="text"))

    with PublisherFactory() as factory:
        # Authorization is masked in the DEBUG output
        factory.request(
            "https://jsonplaceholder.typicode.com/posts/1",
            headers={"Authorization": "Bearer secret-token"},
        ).result(timeout=30)


def json_file_logging():
    print("\n=== JSON logging to file ===")

    log_file = Path(tempfile.gettempdir()) / "request_publisher" / "publisher.log"
    configure_logging(LoggingConfig.create(
        level="INFO",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file),
        extra_fields={"service": "examples"},
    ))

    with PublisherFactory() as factory:
        try:
            factory.request("https://jsonplaceholder.typicode.com/posts/999999").result(timeout=30)
        except Exception as e:
            print(f"Request failed: {e}")

    print(log_file.read_text(encoding="utf-8"))


if __name__ == "__main__":
    console_text_logging()
    json_file_logging()
