"""Codificação de strings, cookies, formulários e arquivos multipart."""

import json
import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, quote_from_bytes, unquote, urlencode

from .logging import get_logger

logger = get_logger(__name__)

BOUNDARY_PREFIX = "-" * 28
BOUNDARY_TOKEN_LENGTH = 12

# Delimitadores e escapes de uma query já codificada passam intactos
QUERY_SAFE = "=&+%;,/:?@"


@dataclass(frozen=True)
class EncodedFile:
    """Corpo multipart pronto para PUT/POST."""

    content_type: str
    body: bytes

    def __repr__(self) -> str:
        return f"<EncodedFile type='{self.content_type}' size={len(self.body)}>"


def encode_string(value: str) -> str:
    """Codifica uma string no estilo RFC 3986 (espaço vira %20)."""
    return quote(str(value), safe="")


def encode_cookies(cookies: Mapping[str, str] | Iterable[tuple[str, str]]) -> str:
    """
    Serializa cookies para o valor de um header ``Cookie``.

    Args:
        cookies: Mapeamento ou pares (nome, valor)

    Returns:
        Pares ``nome=valor`` codificados unidos por ``"; "`` (vazio se não houver cookies)
    """
    pairs = cookies.items() if isinstance(cookies, Mapping) else cookies
    return "; ".join(f"{encode_string(name)}={encode_string(val)}" for name, val in pairs)


def parse_cookie_header(header: str) -> dict[str, str]:
    """Inverso de ``encode_cookies``: decodifica ``a=1; b%20c=2%203``."""
    cookies: dict[str, str] = {}
    for chunk in header.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, _, value = chunk.partition("=")
        cookies[unquote(name)] = unquote(value)
    return cookies


def encode_form(body: Mapping[str, Any]) -> str:
    """Codifica um mapeamento como ``application/x-www-form-urlencoded``."""
    return urlencode(body, doseq=True)


def encode_query_bytes(raw: bytes) -> str:
    """Converte um corpo em bytes para query string, escapando bytes fora do ASCII seguro."""
    return quote_from_bytes(raw, safe=QUERY_SAFE)


def append_query(url: str, query: str) -> str:
    """Anexa uma query string já codificada à URL."""
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    if url.endswith(("?", "&")):
        separator = ""
    return f"{url}{separator}{query}"


def decode_json(content: bytes | str, url: str = "") -> Any:
    """
    Decodifica o corpo de uma resposta como JSON.

    Returns:
        Valor decodificado ou None se o conteúdo não for JSON válido
    """
    try:
        return json.loads(content)
    except (ValueError, TypeError) as e:
        logger.warning(f"Corpo de {url or 'resposta'} não é JSON válido: {e}")
        return None


def make_boundary() -> str:
    """Gera um boundary multipart com token aleatório de 12 caracteres."""
    return BOUNDARY_PREFIX + secrets.token_hex(BOUNDARY_TOKEN_LENGTH // 2)


def encode_file(
    name: str,
    mime_type: str,
    contents: bytes | str,
    boundary: str | None = None,
) -> EncodedFile:
    """
    Cria um corpo multipart/form-data com um único campo ``file``.

    Args:
        name: Nome do arquivo enviado
        mime_type: Tipo MIME do conteúdo
        contents: Conteúdo do arquivo
        boundary: Boundary explícito (gera um aleatório se None)

    Returns:
        EncodedFile com o content type (incluindo boundary) e o corpo
    """
    boundary = boundary or make_boundary()
    if isinstance(contents, str):
        contents = contents.encode("utf-8")

    head = (
        f"--{boundary}\r\n"
        f'Content-disposition: form-data; name="file"; filename="{name}"\r\n'
        f"Content-Type: {mime_type}\r\n"
        "\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--".encode("utf-8")

    return EncodedFile(
        content_type=f"multipart/form-data; boundary={boundary}",
        body=head + contents + tail,
    )
