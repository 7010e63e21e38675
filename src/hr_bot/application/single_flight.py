"""Guarda single-flight por processo.

Enquanto um update está em processamento, os demais que chegam à mesma
instância são descartados (nunca enfileirados). Não protege entre
instâncias: isso cabe ao claim atômico do UpdateDeduplicator.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator


class SingleFlightGuard:
    """Mutex explícito com aquisição não bloqueante."""

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextlib.asynccontextmanager
    async def try_hold(self) -> AsyncIterator[bool]:
        """Entra com True se obteve a guarda, False se já estava ocupada.

        Uso:
            async with guard.try_hold() as held:
                if not held:
                    return
        """
        if not self._enabled:
            yield True
            return

        if self._lock.locked():
            yield False
            return

        # Lock livre: acquire retorna sem ceder o event loop.
        await self._lock.acquire()
        try:
            yield True
        finally:
            self._lock.release()
