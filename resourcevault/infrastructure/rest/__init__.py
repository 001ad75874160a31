from .postgrest_gateway import PostgrestTableGateway

__all__ = ["PostgrestTableGateway"]
