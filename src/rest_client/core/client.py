"""Cliente REST para requisições individuais."""

import mimetypes
import time
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import TracebackType
from typing import Any

import httpx

from ..http import HttpxTransport, TransportError, request_arguments
from ..models import Method, RequestDescriptor, ResponseInfo, RestResponse
from ..utils import get_logger
from ..utils import encoding
from .config import ClientConfig

logger = get_logger(__name__)

FIRST_FAILING_HTTP_CODE = 400
NO_CONTENT = 204


class RestClient:
    """
    Cliente HTTP com headers, cookies, autenticação e timeout configuráveis.

    Com ``auto_execute`` ligado (padrão) cada chamada é executada na hora;
    desligado, a chamada apenas prepara um ``RequestDescriptor`` que pode ser
    enfileirado no ``RestClientMulti``.
    """

    def __init__(
        self,
        headers: list[str] | None = None,
        timeout: httpx.Timeout | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            headers: Headers no formato ``Nome: valor`` (merge com
                ClientConfig.DEFAULT_HEADERS; mesmo nome substitui o padrão)
            timeout: Timeout padrão do cliente httpx
            transport: Transporte httpx alternativo (ex.: ``httpx.MockTransport``)

        Raises:
            TransportError: Se o cliente httpx não puder ser criado
        """
        try:
            self.http_client = httpx.Client(
                timeout=timeout or HttpxTransport.DEFAULT_TIMEOUT,
                transport=transport,
                follow_redirects=True,
            )
        except Exception as e:
            raise TransportError(f"Não foi possível criar a conexão HTTP: {e}") from e

        self.headers: list[str] = merge_headers(ClientConfig.DEFAULT_HEADERS, headers or [])
        self.cookie_jar: dict[str, str] = {}
        self.timeout: float | None = None
        self.auth: tuple[str, str] | None = None
        self._auto_execute = True
        self._url = ""
        self._pending: RequestDescriptor | None = None

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<RestClient url='{self._url}' headers={len(self.headers)}>"

    def close(self) -> None:
        self.http_client.close()

    # ------------------------------------------------------------------
    # Configuração da conexão
    # ------------------------------------------------------------------

    def auto_execute(self, execute: bool) -> "RestClient":
        self._auto_execute = bool(execute)
        return self

    def set_timeout(self, timeout: float) -> bool:
        """Define o timeout (segundos) das próximas requisições."""
        if timeout is None or timeout < 0:
            return False
        self.timeout = float(timeout)
        return True

    def basic_auth(self, user: str, password: str) -> bool:
        self.auth = (str(user), str(password))
        return True

    def get_url(self) -> str:
        """URL da última requisição preparada (ou string vazia)."""
        return self._url

    def descriptor(self) -> RequestDescriptor | None:
        """Última requisição preparada."""
        return self._pending

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def set_headers(self, headers: list[str], overwrite: bool = True) -> bool:
        """
        Define headers no formato ``Nome: valor``.

        Args:
            headers: Lista de headers
            overwrite: Substitui os headers atuais ou acrescenta aos existentes

        Returns:
            False se ``headers`` não for uma lista
        """
        if not isinstance(headers, (list, tuple)):
            return False

        if overwrite:
            if not all(isinstance(h, str) for h in headers):
                return False
            self.headers = list(headers)
            return True

        result = True
        for header in headers:
            result &= self.add_header(header)
        return result

    def add_header(self, header: str) -> bool:
        if not isinstance(header, str):
            return False
        if header not in self.headers:
            self.headers.append(header)
        return True

    def get_headers(self) -> list[str]:
        return list(self.headers)

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def get_cookies(self) -> dict[str, str]:
        return dict(self.cookie_jar)

    def set_cookie(self, name: str, value: str) -> None:
        self.cookie_jar[name] = value

    def delete_cookie(self, name: str) -> bool:
        """Remove um cookie; False se ele não existir."""
        if name in self.cookie_jar:
            del self.cookie_jar[name]
            return True
        return False

    def encode_cookies(self) -> str:
        return encoding.encode_cookies(self.cookie_jar)

    # ------------------------------------------------------------------
    # Chamadas REST
    # ------------------------------------------------------------------

    def get(self, path: str, params: Any = None, decode: bool = False):
        return self.http(Method.GET, path, params, decode)

    def post(self, path: str, params: Any, decode: bool = False):
        return self.http(Method.POST, path, params, decode)

    def put(self, path: str, params: Any, decode: bool = False):
        return self.http(Method.PUT, path, params, decode)

    def delete(self, path: str, params: Any = None, decode: bool = False):
        return self.http(Method.DELETE, path, params, decode)

    def http(
        self,
        method: Method | str,
        path: str,
        body: Mapping[str, Any] | str | bytes | None = None,
        decode: bool = False,
    ) -> RestResponse | RequestDescriptor | bool:
        """
        Prepara (e, com auto execute, executa) uma chamada REST.

        Args:
            method: GET, POST, PUT ou DELETE
            path: URL alvo
            body: Corpo; mapeamentos são codificados como formulário e, em
                GET/DELETE, anexados à URL
            decode: Decodificar a resposta como JSON

        Returns:
            RestResponse se auto execute estiver ligado, senão o descritor
            preparado; False se o método não for suportado
        """
        try:
            method = Method(method.upper() if isinstance(method, str) else method)
        except ValueError:
            logger.error(f"Método HTTP não suportado: {method!r}")
            return False

        self._pending = RequestDescriptor.build(
            method,
            path,
            body=body,
            headers=self.headers,
            cookies=self.cookie_jar,
            decode=decode,
            timeout=self.timeout,
            auth=self.auth,
        )
        self._url = self._pending.url

        if self._auto_execute:
            return self.exec(decode)
        return self._pending

    def exec(self, decode: bool = False) -> RestResponse:
        """
        Executa a requisição preparada.

        Returns:
            RestResponse com ``info`` e ``response`` (None em erro ou sem corpo)

        Raises:
            RuntimeError: Se nenhuma requisição foi preparada
        """
        descriptor = self._pending
        if descriptor is None:
            raise RuntimeError("Nenhuma requisição preparada; chame get/post/put/delete antes")

        started = time.perf_counter()
        try:
            response = self.http_client.request(
                descriptor.method.value,
                descriptor.url,
                **request_arguments(descriptor),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            info = ResponseInfo(
                url=descriptor.url,
                status_code=0,
                elapsed=time.perf_counter() - started,
                request_body=descriptor.body,
            )
            logger.error(f"Erro de requisição em {descriptor.url}: {e}")
            return RestResponse(info=info)

        info = ResponseInfo(
            url=str(response.url),
            status_code=response.status_code,
            elapsed=time.perf_counter() - started,
            request_body=descriptor.body,
            headers=dict(response.headers),
        )

        if info.status_code >= FIRST_FAILING_HTTP_CODE:
            logger.error(f"{info.url} retornou código de erro {info.status_code}: {info.as_dict()}")
            return RestResponse(info=info)

        if info.status_code == NO_CONTENT:
            return RestResponse(info=info, response="")

        if not response.content:
            logger.error(f"{info.url} retornou corpo vazio (status {info.status_code}): {info.as_dict()}")
            return RestResponse(info=info)

        if decode:
            return RestResponse(info=info, response=encoding.decode_json(response.content, info.url))
        return RestResponse(info=info, response=response.text)

    # ------------------------------------------------------------------
    # Codificação
    # ------------------------------------------------------------------

    @staticmethod
    def encode_string(value: str) -> str:
        return encoding.encode_string(value)

    @staticmethod
    def encode_file(name: str, mime_type: str, contents: bytes | str) -> encoding.EncodedFile:
        return encoding.encode_file(name, mime_type, contents)

    def encode_file_from_path(
        self, file_path: str | Path, file_name: str | None = None
    ) -> encoding.EncodedFile | None:
        """
        Lê um arquivo do disco e o codifica como multipart.

        Args:
            file_path: Caminho do arquivo
            file_name: Nome a enviar (padrão: nome do arquivo no disco)

        Returns:
            EncodedFile ou None se o arquivo não existir
        """
        path = Path(file_path)
        if not path.is_file():
            logger.warning(f"Arquivo não encontrado: {path}")
            return None

        mime_type, _ = mimetypes.guess_type(path.name)
        return self.encode_file(
            file_name or path.name,
            mime_type or "application/octet-stream",
            path.read_bytes(),
        )


def merge_headers(defaults: Iterable[str], headers: Iterable[str]) -> list[str]:
    """Combina linhas ``Nome: valor``; headers explícitos substituem os padrão de mesmo nome."""
    headers = list(headers)
    names = {h.partition(":")[0].strip().lower() for h in headers}
    kept = [h for h in defaults if h.partition(":")[0].strip().lower() not in names]
    return kept + headers
