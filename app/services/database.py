"""
Service Accessors
=================
FastAPI dependencies returning the per-application services built in
`create_app` and kept on `app.state`.
"""

from fastapi import Request

from healthmonitor.ai import LLMWrapper
from healthmonitor.auth import JWTHandler, PasswordHandler
from healthmonitor.database import DataStore

from app.config import Settings


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_password_handler(request: Request) -> PasswordHandler:
    return request.app.state.password_handler


def get_jwt_handler(request: Request) -> JWTHandler:
    return request.app.state.jwt_handler


def get_report_generator(request: Request) -> LLMWrapper:
    return request.app.state.report_generator
