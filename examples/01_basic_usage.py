"""
Basic Request Publisher Usage Examples

Demonstrates GET and POST publishers consumed with result(), sink() and
asyncio.
"""

import asyncio
import json
import threading

from request_publisher import HTTPMethod, PublisherFactory, RequestBuilder


def basic_get_request():
    """Simple GET request, blocking for the body."""
    print("\n=== Basic GET Request ===")

    # No transport given: the shared default transport is used
    publisher = RequestBuilder().set_url("https://jsonplaceholder.typicode.com/posts/1").build()
    body = publisher.result(timeout=30)
    print(f"Data: {json.loads(body)}")


def post_with_json(factory: PublisherFactory):
    """POST request; parameters are sent as a JSON body."""
    print("\n=== POST with JSON ===")

    publisher = (
        factory.builder()
        .set_url("https://jsonplaceholder.typicode.com/posts")
        .set_method(HTTPMethod.POST)
        .set_parameters({"title": "My Post", "body": "This is the content", "userId": 1})
        .build()
    )

    print(f"Created: {json.loads(publisher.result(timeout=30))}")


def with_query_params(factory: PublisherFactory):
    """GET parameters go to the query string."""
    print("\n=== GET with Query Params ===")

    body = factory.request("https://jsonplaceholder.typicode.com/posts", parameters={"userId": 1}).result(timeout=30)
    print(f"Found {len(json.loads(body))} posts")


def with_sink(factory: PublisherFactory):
    """Callbacks instead of blocking."""
    print("\n=== Sink ===")

    done = threading.Event()

    def on_value(body):
        print(f"Received {len(body)} bytes")

    def on_completion(completion):
        print(f"Completion: {completion}")
        done.set()

    factory.request("https://jsonplaceholder.typicode.com/users/1").sink(
        receive_value=on_value,
        receive_completion=on_completion,
    )
    done.wait(30)


def with_asyncio(factory: PublisherFactory):
    """Several requests awaited concurrently."""
    print("\n=== asyncio ===")

    async def fetch_all():
        publishers = [factory.request(f"https://jsonplaceholder.typicode.com/posts/{i}") for i in range(1, 4)]
        return await asyncio.gather(*(publisher.aresult() for publisher in publishers))

    for body in asyncio.run(fetch_all()):
        print(f"Title: {json.loads(body)['title']}")


if __name__ == "__main__":
    basic_get_request()

    with PublisherFactory() as shared:
        post_with_json(shared)
        with_query_params(shared)
        with_sink(shared)
        with_asyncio(shared)
