"""Agregação dos resultados de um lote."""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from ..models import ResultRecord
from ..utils import get_logger
from ..utils.encoding import decode_json

logger = get_logger(__name__)

T = TypeVar("T")

MergeFn = Callable[[list[ResultRecord]], T]


class ResultAggregator:
    """Aplica a função de merge (opcional) sobre os resultados de um lote."""

    @staticmethod
    def aggregate(
        results: list[ResultRecord],
        merge: MergeFn | Any = None,
    ) -> T | list[ResultRecord]:
        """
        Args:
            results: Resultados na ordem de conclusão
            merge: Função que recebe a lista inteira; qualquer valor não
                chamável é tratado como ausente

        Returns:
            ``merge(results)`` ou a própria lista
        """
        if callable(merge):
            return merge(results)

        if merge is not None:
            logger.debug(f"Merge ignorado (não é chamável): {merge!r}")
        return results


def collect_bodies(results: Sequence[ResultRecord]) -> list[Any]:
    """Merge que devolve apenas os corpos."""
    return [r.body for r in results]


def decode_json_bodies(results: Sequence[ResultRecord]) -> list[Any]:
    """Merge que decodifica cada corpo como JSON (já decodificados passam direto)."""
    decoded = []
    for r in results:
        if isinstance(r.body, (bytes, str)):
            decoded.append(decode_json(r.body, r.info.url) if r.body else None)
        else:
            decoded.append(r.body)
    return decoded


def count_results(results: Sequence[ResultRecord]) -> int:
    return len(results)
