"""Fetch errors and their user-facing messages."""

from __future__ import annotations

import asyncio
import socket

import httpx

NOT_FOUND_MESSAGE = "Festival data not found. Please try a different festival."
FESTIVALS_NOT_FOUND_MESSAGE = "Festival list not found. Please try again later."
SERVER_ERROR_MESSAGE = "Server error. Please try again later."
CLIENT_ERROR_MESSAGE = "Could not load drinks. Please try again."
DRINKS_CONNECTION_MESSAGE = "Could not load drinks. Please check your connection."
FESTIVALS_CONNECTION_MESSAGE = "Could not load festivals. Please check your connection."
TIMEOUT_MESSAGE = "Request timed out. Please check your connection and try again."
NO_NETWORK_MESSAGE = "No internet connection. Please check your network."
GENERIC_MESSAGE = "Something went wrong. Please try again."


class FetchError(RuntimeError):
    """Base error for remote feed failures, with an optional HTTP status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CatalogError(FetchError):
    pass


class FestivalServiceError(FetchError):
    pass


def user_friendly_message(error: BaseException) -> str:
    """Map any fetch failure to a fixed message safe to show to a user."""
    if isinstance(error, FetchError):
        status = error.status_code
        if status == 404:
            if isinstance(error, FestivalServiceError):
                return FESTIVALS_NOT_FOUND_MESSAGE
            return NOT_FOUND_MESSAGE
        if status is not None and status >= 500:
            return SERVER_ERROR_MESSAGE
        if isinstance(error, FestivalServiceError):
            return FESTIVALS_CONNECTION_MESSAGE
        if status is not None and status >= 400:
            return CLIENT_ERROR_MESSAGE
        return DRINKS_CONNECTION_MESSAGE
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return TIMEOUT_MESSAGE
    if isinstance(error, (httpx.NetworkError, socket.gaierror, ConnectionError)):
        return NO_NETWORK_MESSAGE
    return GENERIC_MESSAGE
