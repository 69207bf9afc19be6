"""Modelo de requisição pendente (descritor)."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..utils.encoding import append_query, encode_cookies, encode_form, encode_query_bytes


class Method(str, Enum):
    """Métodos HTTP suportados."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def sends_body(self) -> bool:
        """POST e PUT enviam o corpo; GET e DELETE o levam na query string."""
        return self in (Method.POST, Method.PUT)


@dataclass(frozen=True)
class RequestDescriptor:
    """Descrição imutável de uma chamada HTTP a executar."""

    method: Method
    url: str
    body: str | bytes | None = None
    headers: tuple[str, ...] = ()
    cookies: tuple[tuple[str, str], ...] = ()
    decode: bool = False
    timeout: float | None = None
    auth: tuple[str, str] | None = None

    @classmethod
    def build(
        cls,
        method: Method | str,
        url: str,
        body: Mapping[str, Any] | str | bytes | None = None,
        headers: Iterable[str] = (),
        cookies: Mapping[str, str] | None = None,
        decode: bool = False,
        timeout: float | None = None,
        auth: tuple[str, str] | None = None,
    ) -> "RequestDescriptor":
        """
        Monta um descritor a partir de valores "crus".

        Mapeamentos no corpo são codificados como formulário; em GET/DELETE o
        corpo codificado é anexado à URL como query string.

        Raises:
            ValueError: Se o método não for suportado
        """
        method = Method(method.upper() if isinstance(method, str) else method)

        if isinstance(body, Mapping):
            body = encode_form(body)

        if not method.sends_body and body:
            query = encode_query_bytes(body) if isinstance(body, bytes) else body
            url = append_query(url, query)

        return cls(
            method=method,
            url=url,
            body=body,
            headers=tuple(headers),
            cookies=tuple((cookies or {}).items()),
            decode=decode,
            timeout=timeout,
            auth=auth,
        )

    @property
    def cookie_header(self) -> str:
        return encode_cookies(self.cookies)

    @property
    def payload(self) -> str | bytes | None:
        """Conteúdo efetivamente enviado no corpo da requisição."""
        return self.body if self.method.sends_body else None

    def header_pairs(self) -> list[tuple[str, str]]:
        """Converte as linhas ``Nome: valor`` em pares (inclui o header Cookie)."""
        pairs = []
        for line in self.headers:
            name, _, value = line.partition(":")
            pairs.append((name.strip(), value.strip()))

        cookie = self.cookie_header
        if cookie:
            pairs.append(("Cookie", cookie))

        if isinstance(self.body, str) and self.method.sends_body and not any(
            name.lower() == "content-type" for name, _ in pairs
        ):
            pairs.append(("Content-Type", "application/x-www-form-urlencoded"))
        return pairs

    def __repr__(self) -> str:
        return f"<RequestDescriptor {self.method.value} {self.url}>"
