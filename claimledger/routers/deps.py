from fastapi import Request

from claimledger.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    """Service container built at startup (see claimledger.main)."""
    return request.app.state.services
