from storefront_pricing.middleware.request_log import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
