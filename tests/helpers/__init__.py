from .mocks import MockTransport, echo_path, products_page_responder

__all__ = [
    "MockTransport",
    "echo_path",
    "products_page_responder",
]
