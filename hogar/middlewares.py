from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from hogar.config import settings
import time
import logging
from datetime import datetime, timedelta

logger = logging.getLogger("hogar.http")


class LoginRateLimiter:
    """
    Límite de intentos de login por IP en una ventana deslizante, en memoria.
    Las IPs cuyos intentos ya salieron de la ventana se descartan en cada
    llamada, así la tabla solo contiene clientes recientes.
    """

    def __init__(self, limit: int, window: timedelta = timedelta(minutes=1)):
        self.limit = limit
        self.window = window
        self._attempts: dict[str, list[datetime]] = {}

    def __len__(self) -> int:
        return len(self._attempts)

    def _purge(self, now: datetime) -> None:
        stale = [ip for ip, attempts in self._attempts.items() if now - attempts[-1] >= self.window]
        for ip in stale:
            del self._attempts[ip]

    def hit(self, client_ip: str, now: datetime | None = None) -> bool:
        """Registra un intento; devuelve False si la IP superó el límite."""
        now = now or datetime.now()
        self._purge(now)

        recent = [a for a in self._attempts.get(client_ip, []) if now - a < self.window]
        if len(recent) >= self.limit:
            self._attempts[client_ip] = recent
            return False

        recent.append(now)
        self._attempts[client_ip] = recent
        return True


def setup_middlewares(app: FastAPI):
    # GZIP Compression - comprime respuestas > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Orígenes permitidos desde CORS_ORIGINS (separados por coma)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = LoginRateLimiter(settings.login_rate_limit)
    login_path = f"{settings.api_prefix}/auth/login"

    @app.middleware("http")
    async def rate_limit_and_timing(request: Request, call_next):
        if request.url.path == login_path and request.method == "POST":
            client_ip = request.client.host if request.client else "unknown"

            if not limiter.hit(client_ip):
                logger.warning("Login rate limit exceeded", extra={"client_ip": client_ip})
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": True,
                        "message": "Demasiados intentos de inicio de sesión. Intenta nuevamente en 1 minuto.",
                        "type": "rate_limited",
                    }
                )

        start = time.time()
        resp = await call_next(request)
        dur = (time.time() - start) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, resp.status_code, dur)
        return resp
