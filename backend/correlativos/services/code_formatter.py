"""Display format of issued correlatives."""

from correlativos.core.config import settings


def format_code(sigla: str, number: int, width: int | None = None) -> str:
    """Return ``"{sigla}-{number}"`` with the number zero-padded to ``width``.

    Numbers wider than ``width`` are kept whole: ``format_code("INF", 1000)``
    is ``"INF-1000"``.
    """

    width = settings.CORRELATIVE_CODE_WIDTH if width is None else width
    if number < 1:
        raise ValueError(f"correlative number must be positive, got {number}")
    if width < 1:
        raise ValueError(f"code width must be positive, got {width}")
    return f"{sigla}-{number:0{width}d}"
