from __future__ import annotations

from flask import Flask, current_app, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    """Erro de dominio com status HTTP e codigo curto para o cliente."""

    def __init__(
        self,
        message: str,
        status: int = 500,
        code: str = "INTERNAL_ERROR",
        details: list | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class NotFound(AppError):
    def __init__(self, message: str = "Registro nao encontrado"):
        super().__init__(message, 404, "NOT_FOUND")


class Forbidden(AppError):
    def __init__(self, message: str = "Acesso negado"):
        super().__init__(message, 403, "FORBIDDEN")


class InvalidInput(AppError):
    def __init__(self, message: str, code: str = "INVALID_INPUT"):
        super().__init__(message, 400, code)


def detalhes_validacao(exc: ValidationError) -> list[dict]:
    return [
        {"campo": ".".join(str(parte) for parte in erro["loc"]), "mensagem": erro["msg"]}
        for erro in exc.errors()
    ]


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(exc: AppError):
        if exc.status >= 500:
            current_app.logger.error("Erro de aplicacao [%s]: %s", exc.code, exc.message)
        return jsonify(exc.to_dict()), exc.status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return (
            jsonify(
                {
                    "error": "Payload invalido",
                    "code": "VALIDATION_ERROR",
                    "details": detalhes_validacao(exc),
                }
            ),
            400,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        code = (exc.name or "HTTP_ERROR").upper().replace(" ", "_")
        return jsonify({"error": exc.description, "code": code}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        current_app.logger.exception("Erro inesperado ao processar requisicao.")
        message = "Erro interno"
        if current_app.config.get("APP_ENV") != "production":
            message = str(exc) or message
        return jsonify({"error": message, "code": "INTERNAL_ERROR"}), 500
