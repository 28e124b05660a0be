"""
Error Handling Examples

Failures arrive as typed exceptions, or as serialized ErrorModel values
when ErrorDelivery.VALUE is selected.
"""

from request_publisher import (
    ErrorDelivery,
    ErrorModel,
    NotFoundError,
    PublisherFactory,
    RequestPublisherException,
)


def handle_not_found(factory: PublisherFactory):
    print("\n=== 404 as exception ===")

    try:
        factory.request("https://jsonplaceholder.typicode.com/posts/999999").result(timeout=30)
    except NotFoundError as e:
        print(f"Not found: status={e.status_code} message={e.error_model.message}")


def handle_any_failure(factory: PublisherFactory):
    print("\n=== Transport failure ===")

    try:
        factory.request("https://unreachable.invalid/").result(timeout=30)
    except RequestPublisherException as e:
        # Transport failures carry negative codes
        print(f"{e.__class__.__name__}: retryable={e.retryable} code={e.status_code}")


def errors_as_values(factory: PublisherFactory):
    print("\n=== Errors as values ===")

    publisher = (
        factory.builder()
        .set_url("https://jsonplaceholder.typicode.com/posts/999999")
        .set_error_delivery(ErrorDelivery.VALUE)
        .build()
    )

    body = publisher.result(timeout=30)
    try:
        error = ErrorModel.from_bytes(body)
        print(f"Error value: {error}")
    except ValueError:
        print(f"Payload: {body[:80]!r}")


if __name__ == "__main__":
    with PublisherFactory() as shared:
        handle_not_found(shared)
        handle_any_failure(shared)
        errors_as_values(shared)
