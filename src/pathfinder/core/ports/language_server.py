from typing import Any, Protocol


class LanguageServer(Protocol):
    async def request(self, method: str, params: Any) -> Any: ...

    async def notify(self, method: str, params: Any) -> None: ...
