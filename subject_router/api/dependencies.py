from fastapi import Request

from subject_router.services.container import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
