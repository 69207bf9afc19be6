"""Script CLI para buscar várias URLs em paralelo com o RestClientMulti."""

import argparse
import os
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.table import Table

from rest_client.core import ClientConfig, RestClient, RestClientMulti
from rest_client.models import OutcomeKind, RequestDescriptor
from rest_client.utils import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()

DEMO_THREADS = [
    "aww",
    "history",
    "philosophy",
    "diy",
    "tifu",
    "earthporn",
    "fitness",
    "news",
    "creepy",
    "books",
]


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse argumentos de linha de comando."""
    parser = argparse.ArgumentParser(
        description="Executa várias requisições GET em paralelo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
  # Demo com 10 subreddits
  python run_multi.py --demo

  # URLs explícitas, no máximo 3 simultâneas
  python run_multi.py https://httpbin.org/get https://httpbin.org/uuid --limit 3

  # URLs de um arquivo (uma por linha), decodificando JSON
  python run_multi.py --urls-file urls.txt --decode --log-level DEBUG
        """,
    )

    parser.add_argument("urls", nargs="*", help="URLs a requisitar")

    source_group = parser.add_argument_group("Origem das URLs")
    source_group.add_argument(
        "--urls-file", type=Path, help="Arquivo com uma URL por linha"
    )
    source_group.add_argument(
        "--demo", action="store_true", help="Usa a lista de subreddits de exemplo"
    )

    exec_group = parser.add_argument_group("Configurações do Executor")
    exec_group.add_argument(
        "--limit",
        type=int,
        default=int(os.getenv("REST_CLIENT_LIMIT", ClientConfig.DEFAULT_LIMIT)),
        help="Máximo de requisições simultâneas, 0 = todas (padrão: 0 ou $REST_CLIENT_LIMIT)",
    )
    exec_group.add_argument(
        "--poll-interval",
        type=int,
        default=int(
            os.getenv("REST_CLIENT_POLL_INTERVAL_US", ClientConfig.DEFAULT_POLL_INTERVAL_US)
        ),
        help="Intervalo de poll em microssegundos (padrão: 25000 ou $REST_CLIENT_POLL_INTERVAL_US)",
    )
    exec_group.add_argument(
        "--no-legacy-admission",
        action="store_true",
        help="Admite todas as requisições de início quando não há limite",
    )
    exec_group.add_argument(
        "--decode", action="store_true", help="Decodifica as respostas como JSON"
    )
    exec_group.add_argument(
        "--header",
        action="append",
        default=[],
        help="Header extra no formato 'Nome: valor' (pode repetir)",
    )

    log_group = parser.add_argument_group("Configurações de Log")
    log_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Nível de logging (padrão: INFO)",
    )
    log_group.add_argument(
        "--log-file", type=Path, help="Arquivo para salvar logs (opcional)"
    )

    return parser.parse_args(argv)


def collect_urls(args: argparse.Namespace) -> list[str]:
    """Junta as URLs da linha de comando, do arquivo e da demo."""
    urls = list(args.urls)

    if args.urls_file:
        lines = args.urls_file.read_text(encoding="utf-8").splitlines()
        urls.extend(line.strip() for line in lines if line.strip() and not line.startswith("#"))

    if args.demo:
        urls.extend(f"https://www.reddit.com/r/{thread}/.json" for thread in DEMO_THREADS)

    return urls


def build_descriptors(urls: list[str], headers: list[str], decode: bool) -> list[RequestDescriptor]:
    """Prepara um descritor GET por URL através do RestClient."""
    descriptors = []
    if not all(isinstance(h, str) for h in headers):
        raise ValueError(f"Headers inválidos: {headers}")

    with RestClient(headers=headers) as client:
        client.auto_execute(False)
        for url in urls:
            descriptors.append(client.get(url, decode=decode))
    return descriptors


def display_results(multi: RestClientMulti, results: list, elapsed: float) -> None:
    """Exibe o desfecho de cada requisição usando Rich."""
    table = Table(title="Resultado das requisições", show_header=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("URL", style="cyan")
    table.add_column("Desfecho", style="green")
    table.add_column("Status", justify="right")

    styles = {
        OutcomeKind.SUCCESS: "green",
        OutcomeKind.HTTP_ERROR: "red",
        OutcomeKind.TRANSPORT_ERROR: "red",
        OutcomeKind.ABORTED: "yellow",
        OutcomeKind.NOT_RUN: "dim",
    }
    for i, outcome in enumerate(multi.outcomes):
        style = styles[outcome.kind]
        table.add_row(
            str(i),
            outcome.descriptor.url,
            f"[{style}]{outcome.kind.value}[/{style}]",
            str(outcome.status_code or "-"),
        )

    console.print(table)

    total = len(multi.outcomes)
    per_request = elapsed / total if total else 0.0
    console.print(
        f"Sucesso: {len(results)}/{total} | "
        f"Tempo total: {elapsed:.2f}s ou {per_request:.4f}s por requisição | "
        f"Pico simultâneo: {multi.peak_in_flight}"
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    urls = collect_urls(args)
    if not urls:
        logger.error("Nenhuma URL informada (use URLs, --urls-file ou --demo)")
        return 1

    try:
        config = ClientConfig(
            limit=args.limit,
            poll_interval_us=args.poll_interval,
            legacy_admission=not args.no_legacy_admission,
        )
        descriptors = build_descriptors(urls, args.header, args.decode)
    except ValueError as e:
        logger.error(f"Configuração inválida: {e}")
        return 1

    with RestClientMulti(config=config) as multi:
        multi.enqueue(descriptors)

        start = time.perf_counter()
        try:
            results = multi.execute()
        except KeyboardInterrupt:
            logger.info("Interrompido pelo usuário (Ctrl+C)")
            return 130
        elapsed = time.perf_counter() - start

        display_results(multi, results, elapsed)

    return 0 if results else 1


if __name__ == "__main__":
    sys.exit(main())
